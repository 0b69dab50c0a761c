"""
Pack：物理移除已删除记录，幸存记录前移成连续前缀
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .writable_table import WritableTable

logger = logging.getLogger(__name__)


class Compactor:

    def __init__(self, table: "WritableTable"):
        self.table = table

    def pack(self) -> int:
        """返回移除的记录数。"""
        table = self.table
        header = table.header
        memo_columns = table.memo_columns()
        old_count = header.record_count
        new_count = 0

        for index in range(old_count):
            record = table.pick_record(index)
            if record.is_deleted():
                # 释放该记录引用的备注块
                for column in memo_columns:
                    pointer = record.get_genuine(column.name)
                    if pointer:
                        table.memo.delete(pointer)
                continue
            # new_count <= index，向前覆写不会破坏尚未访问的记录
            record.index = new_count
            new_count += 1
            table.write_record(record)

        header.record_count = new_count
        size = table.cursor.truncate_to(new_count)
        logger.info(f"pack 完成: {table.path}, 记录数 {old_count} -> {new_count}, 文件截断到 {size} 字节")
        return old_count - new_count
