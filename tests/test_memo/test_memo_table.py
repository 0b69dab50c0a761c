"""
表 + 备注文件联动测试：pack 回收备注块并平移指针
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from xbase.storage import Table, TableBuilder, TableType, WritableTable
from xbase.storage.constants import MEMO_BLOCK_SIZE
from xbase.utils.exceptions import RecordError


class TestMemoTable(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "notes.dbf")
        self.memo_path = os.path.join(self.temp_dir, "notes.dbt")
        (TableBuilder(TableType.DBASE_III_PLUS_MEMO)
            .add_column("name", "C", 8)
            .add_column("notes", "M")
            .build(self.path))
        self.contents = {"first": "a" * 600, "second": "b", "third": "c", "fourth": None}
        with WritableTable(self.path) as table:
            for name, text in self.contents.items():
                record = table.append_record()
                record.set("name", name)
                table.set_memo(record, "notes", text)
                table.write_record()
            table.save()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def assert_no_dangling_pointers(self, expected):
        with Table(self.path) as table:
            seen = {}
            for record in table.records():
                seen[record.get("name")] = table.get_memo(record, "notes")
                pointer = record.get_genuine("notes")
                if pointer is not None:
                    self.assertLess(pointer, table.memo.next_free)
            self.assertEqual(seen, expected)

    def test_memo_round_trip(self):
        with Table(self.path) as table:
            pointers = [r.get_genuine("notes") for r in table.records()]
        self.assertEqual(pointers, [1, 3, 4, None])
        self.assert_no_dangling_pointers(self.contents)

    def test_pack_frees_memo_of_deleted_record(self):
        with WritableTable(self.path) as table:
            table.delete_record(table.move_to(0))
            table.pack()
            table.save()
        with Table(self.path) as table:
            self.assertEqual(table.record_count, 3)
            self.assertEqual([r.get_genuine("notes") for r in table.records()], [1, 2, None])
        self.assertEqual(os.path.getsize(self.memo_path), 3 * MEMO_BLOCK_SIZE)
        expected = dict(self.contents)
        del expected["first"]
        self.assert_no_dangling_pointers(expected)

    def test_pack_middle_record_leaves_earlier_pointers(self):
        with WritableTable(self.path, edit_mode="realtime") as table:
            table.delete_record(table.move_to(1))
            table.pack()
        with Table(self.path) as table:
            self.assertEqual([r.get_genuine("notes") for r in table.records()], [1, 3, None])
        expected = dict(self.contents)
        del expected["second"]
        self.assert_no_dangling_pointers(expected)

    def test_replacing_memo_reclaims_old_block(self):
        with WritableTable(self.path) as table:
            record = table.move_to(0)
            table.set_memo(record, "notes", "short")
            table.write_record()
            table.save()
            self.assertEqual(table.pick_record(0).get_genuine("notes"), 3)
        expected = dict(self.contents, first="short")
        self.assert_no_dangling_pointers(expected)
        self.assertEqual(os.path.getsize(self.memo_path), 4 * MEMO_BLOCK_SIZE)

    def test_clearing_memo(self):
        with WritableTable(self.path) as table:
            record = table.move_to(1)
            table.set_memo(record, "notes", None)
            table.write_record()
            table.save()
        expected = dict(self.contents, second=None)
        self.assert_no_dangling_pointers(expected)

    def test_collect_garbage_mid_session(self):
        with WritableTable(self.path) as table:
            record = table.move_to(1)
            table.set_memo(record, "notes", None)
            table.write_record()
            event = table.collect_memo_garbage()
            self.assertEqual(event.blocks, {3: 1})
            self.assertEqual(table.pick_record(2).get_genuine("notes"), 3)
            self.assertEqual(table.get_memo(table.pick_record(2), "notes"), "c")
            self.assertIsNone(table.collect_memo_garbage())
            table.save()
        expected = dict(self.contents, second=None)
        self.assert_no_dangling_pointers(expected)

    def test_collect_garbage_rejects_unwritten_memo_edit(self):
        with WritableTable(self.path) as table:
            table.move_to(3)
            record = table.pick_record(0)
            table.set_memo(record, "notes", "new")
            with self.assertRaises(RecordError):
                table.collect_memo_garbage()
            table.write_record(record)
            event = table.collect_memo_garbage()
            self.assertEqual(event.blocks, {1: 2})
            table.save()
        expected = dict(self.contents, first="new")
        self.assert_no_dangling_pointers(expected)

    def test_failed_table_commit_leaves_original_pair(self):
        with open(self.memo_path, "rb") as f:
            memo_before = f.read()
        with WritableTable(self.path) as table:
            table.delete_record(table.move_to(0))
            table.pack()
            with patch.object(table.strategy, "commit", side_effect=OSError("disk full")):
                with self.assertRaises(OSError):
                    table.save()
        with open(self.memo_path, "rb") as f:
            self.assertEqual(f.read(), memo_before)
        self.assert_no_dangling_pointers(self.contents)

    def test_clone_mode_memo_untouched_until_save(self):
        with open(self.memo_path, "rb") as f:
            before = f.read()
        with WritableTable(self.path) as table:
            table.delete_record(table.move_to(0))
            table.pack()
        with open(self.memo_path, "rb") as f:
            self.assertEqual(f.read(), before)
        self.assert_no_dangling_pointers(self.contents)

    def test_set_memo_on_plain_column(self):
        with WritableTable(self.path) as table:
            with self.assertRaises(RecordError):
                table.set_memo(table.move_to(0), "name", "text")


if __name__ == "__main__":
    unittest.main()
