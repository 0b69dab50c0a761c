"""
命令行工具测试
"""

import os
import shutil
import tempfile
import unittest

from click.testing import CliRunner

from xbase.frontend.cli import cli
from xbase.storage import Table, TableBuilder, WritableTable


class TestCli(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "people.dbf")
        TableBuilder().add_column("name", "C", 10).add_column("age", "N", 3).build(self.path)
        with WritableTable(self.path, edit_mode="realtime") as table:
            for name, age in (("alice", 30), ("bob", 40), ("carol", 50)):
                record = table.append_record()
                record.set("name", name)
                record.set("age", age)
                table.write_record()
        self.runner = CliRunner()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_info(self):
        result = self.runner.invoke(cli, ["info", self.path])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("记录数: 3", result.output)
        self.assertIn("NAME", result.output)

    def test_delete_list_undelete(self):
        result = self.runner.invoke(cli, ["delete", self.path, "1"])
        self.assertEqual(result.exit_code, 0, result.output)
        with Table(self.path) as table:
            self.assertTrue(table.pick_record(1).is_deleted())

        result = self.runner.invoke(cli, ["list", self.path])
        self.assertNotIn("bob", result.output)
        result = self.runner.invoke(cli, ["list", "--deleted", self.path])
        self.assertIn("bob", result.output)

        result = self.runner.invoke(cli, ["--realtime", "undelete", self.path, "1"])
        self.assertEqual(result.exit_code, 0, result.output)
        with Table(self.path) as table:
            self.assertFalse(table.pick_record(1).is_deleted())

    def test_pack(self):
        self.runner.invoke(cli, ["delete", self.path, "0", "2"])
        result = self.runner.invoke(cli, ["pack", self.path])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("3 -> 1", result.output)
        with Table(self.path) as table:
            self.assertEqual([r.get("name") for r in table.records()], ["bob"])

    def test_bad_index_reports_error(self):
        result = self.runner.invoke(cli, ["delete", self.path, "9"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("越界", result.output)

    def test_not_a_table(self):
        junk = os.path.join(self.temp_dir, "junk.dbf")
        with open(junk, "wb") as f:
            f.write(b"short")
        result = self.runner.invoke(cli, ["info", junk])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("截断", result.output)


if __name__ == "__main__":
    unittest.main()
