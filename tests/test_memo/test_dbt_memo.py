"""
dBase III 备注文件测试
"""

import os
import shutil
import tempfile
import unittest

from xbase.memo import DBase3Memo, create_dbt, open_memo
from xbase.storage.constants import MEMO_BLOCK_SIZE
from xbase.storage.edit_mode import DirectStrategy, EditMode
from xbase.storage.table_type import TableType
from xbase.utils.exceptions import MemoError, UnsupportedMemoFormatError


class TestDBase3Memo(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "notes.dbt")
        create_dbt(self.path)
        self.memo = DBase3Memo(self.path, "cp1252", DirectStrategy(self.path))

    def tearDown(self):
        self.memo.close()
        shutil.rmtree(self.temp_dir)

    def test_allocate_and_read(self):
        first = self.memo.allocate("hello")
        second = self.memo.allocate("x" * 600)
        third = self.memo.allocate("world")
        self.assertEqual((first, second, third), (1, 2, 4))
        self.assertEqual(self.memo.next_free, 5)
        self.assertEqual(self.memo.get(first), "hello")
        self.assertEqual(self.memo.get(second), "x" * 600)
        self.assertEqual(self.memo.block_count(second), 2)
        self.assertEqual(os.path.getsize(self.path), 5 * MEMO_BLOCK_SIZE)

    def test_compact_moves_later_blocks_down(self):
        first = self.memo.allocate("a" * 600)
        second = self.memo.allocate("b")
        third = self.memo.allocate("c")
        self.memo.delete(first)
        self.memo.delete(first)
        event = self.memo.compact()
        self.assertEqual(event.blocks, {first: 2})
        self.assertEqual(self.memo.next_free, 3)
        self.assertEqual(self.memo.get(second - 2), "b")
        self.assertEqual(self.memo.get(third - 2), "c")
        self.assertEqual(os.path.getsize(self.path), 3 * MEMO_BLOCK_SIZE)
        self.assertIsNone(self.memo.compact())

    def test_compact_several_runs(self):
        pointers = [self.memo.allocate(text) for text in ("a", "b", "c", "d", "e")]
        self.memo.delete(pointers[1])
        self.memo.delete(pointers[3])
        event = self.memo.save()
        self.assertEqual(event.blocks, {pointers[1]: 1, pointers[3]: 1})
        self.assertEqual([self.memo.get(p) for p in (1, 2, 3)], ["a", "c", "e"])
        with open(self.path, "rb") as f:
            self.assertEqual(int.from_bytes(f.read(4), "little"), 4)

    def test_pointer_out_of_range(self):
        with self.assertRaises(MemoError):
            self.memo.get(3)
        self.assertIsNone(self.memo.get(None))

    def test_content_cannot_hold_terminator(self):
        with self.assertRaises(MemoError):
            self.memo.allocate("bad\x1acontent")

    def test_read_only_rejects_writes(self):
        readonly = DBase3Memo(self.path, "cp1252")
        try:
            with self.assertRaises(MemoError):
                readonly.allocate("nope")
        finally:
            readonly.close()


class TestOpenMemo(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.table_path = os.path.join(self.temp_dir, "notes.dbf")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_finds_companion_file(self):
        create_dbt(os.path.join(self.temp_dir, "notes.dbt"))
        memo = open_memo(self.table_path, TableType.DBASE_III_PLUS_MEMO, "cp1252", edit_mode=EditMode.REALTIME)
        try:
            self.assertTrue(memo.writable)
            self.assertEqual(memo.next_free, 1)
        finally:
            memo.close()

    def test_missing_companion_file(self):
        with self.assertRaises(MemoError):
            open_memo(self.table_path, TableType.DBASE_III_PLUS_MEMO, "cp1252")

    def test_foxpro_memo_unsupported(self):
        with self.assertRaises(UnsupportedMemoFormatError):
            open_memo(self.table_path, TableType.VISUAL_FOXPRO, "cp1252")


if __name__ == "__main__":
    unittest.main()
