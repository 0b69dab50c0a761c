"""
备注块被回收后，平移每条记录中的备注指针
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .header import Column
from .record import Record
from ..memo.base import MemoBlocksDeleted

if TYPE_CHECKING:
    from .writable_table import WritableTable

logger = logging.getLogger(__name__)


class PointerRemapper:
    """对指针 p，减去所有起点严格小于 p 的被删块长度。"""

    def __init__(self, table: "WritableTable"):
        self.table = table

    @staticmethod
    def shift_record(record: Record, columns: List[Column], event: MemoBlocksDeleted) -> bool:
        changed = False
        for column in columns:
            pointer: Optional[int] = record.get_genuine(column.name)
            if not pointer:
                continue
            shift = event.shift_for(pointer)
            if shift > 0:
                record.set_genuine(column.name, pointer - shift)
                changed = True
        return changed

    def remap(self, event: MemoBlocksDeleted) -> int:
        """返回被重写的记录数。"""
        table = self.table
        columns = table.memo_columns()
        if not event or not columns:
            return 0

        rewritten = 0
        for index in range(table.header.record_count):
            record = table.pick_record(index)
            if self.shift_record(record, columns, event):
                table.write_record(record)
                rewritten += 1

        # 内存中的当前记录（含尚未写入的追加记录）同步平移
        if table.record is not None:
            self.shift_record(table.record, columns, event)

        logger.info(f"备注指针重映射: {table.path}, 回收 {len(event.blocks)} 段, 重写 {rewritten} 条记录")
        return rewritten
