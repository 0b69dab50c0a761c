"""
可写表：追加/写入/删除/恢复/pack/保存
"""

from __future__ import annotations

import logging
import os
import weakref
from datetime import date
from typing import Optional, Union

from .compactor import Compactor
from .constants import DEFAULT_EDIT_MODE, DEFAULT_ENCODING, END_OF_FILE_MARKER, RECORD_ACTIVE
from .edit_mode import EditMode, create_strategy
from .header import HeaderWriter
from .record import Record
from .remapper import PointerRemapper
from .table import Table
from .table_type import has_memo
from ..memo import MemoBlocksDeleted, WritableMemo, open_memo
from ..utils.exceptions import RecordError

logger = logging.getLogger(__name__)


class WritableTable(Table):
    """单写者编辑会话。

    clone 模式下所有修改落在临时副本上，save 时替换原文件；
    realtime 模式下直接修改原文件，每次追加写入后立即 save。
    """

    def __init__(
        self,
        path: str,
        edit_mode: Union[EditMode, str] = DEFAULT_EDIT_MODE,
        encoding: str = DEFAULT_ENCODING,
        memo_path: Optional[str] = None,
    ):
        self.strategy = create_strategy(path, edit_mode)
        # 当前记录是否为尚未写入的追加记录
        self._insertion = False
        # set_memo 修改过的记录
        self._memo_edits: "weakref.WeakSet[Record]" = weakref.WeakSet()
        super().__init__(path, encoding=encoding, memo_path=memo_path)

    @property
    def edit_mode(self) -> EditMode:
        return self.strategy.mode

    def open(self) -> None:
        self.fp = open(self.strategy.open(), "r+b")

    def open_memo(self) -> None:
        if has_memo(self.version):
            self.memo = open_memo(self.path, self.version, self.encoding, self.memo_path, self.edit_mode)

    def close(self) -> None:
        try:
            super().close()
        finally:
            self.strategy.release()
            self._insertion = False

    # --- 记录编辑 ---
    def append_record(self) -> Record:
        self._ensure_open()
        self.record_pos = self.header.record_count
        self.record = self.codec.blank(self.record_pos)
        self._insertion = True
        return self.record

    def write_record(self, record: Optional[Record] = None) -> "WritableTable":
        self._ensure_open()
        record = record if record is not None else self.record
        if record is None:
            return self

        data = self.codec.to_bytes(record)
        self.cursor.write(record.index, data)
        record.mark_written(data)

        inserted = self._insertion and record is self.record
        if inserted:
            self.header.record_count += 1
            self._insertion = False
            if self.strategy.saves_immediately:
                self.save()
        return self

    def delete_record(self, record: Optional[Record] = None) -> "WritableTable":
        self._ensure_open()
        # 尚未写入的追加记录直接丢弃，不触碰文件
        if self._insertion and self.record is not None and (record is None or record is self.record):
            self.record = None
            self.record_pos = -1
            self._insertion = False
            return self

        record = record if record is not None else self.record
        if record is None:
            return self

        record.set_deleted(True)
        self.write_record(record)
        return self

    def undelete_record(self, record: Optional[Record] = None) -> "WritableTable":
        self._ensure_open()
        record = record if record is not None else self.record
        if record is None or not record.is_deleted():
            return self

        record.set_deleted(False)
        # 尚未写入的追加记录只改内存中的标记
        if record.index >= self.header.record_count:
            return self
        # 只改写删除标记字节
        self.cursor.write_byte(record.index, RECORD_ACTIVE)
        if record.raw is not None:
            record.raw = RECORD_ACTIVE + record.raw[1:]
        return self

    # --- 备注 ---
    def set_memo(self, record: Record, name: str, content: Optional[str]) -> Record:
        """为记录的备注列写入新内容，旧备注块标记回收。"""
        self._ensure_open()
        column = self.get_column(name)
        if column not in self.memo_columns() or not isinstance(self.memo, WritableMemo):
            raise RecordError(f"{column.name} 不是备注列")
        old = record.get_genuine(column.name)
        if old:
            self.memo.delete(old)
        pointer = self.memo.allocate(content) if content is not None else None
        record.set_genuine(column.name, pointer)
        self._memo_edits.add(record)
        return record

    def collect_memo_garbage(self) -> Optional[MemoBlocksDeleted]:
        """会话中途回收备注块并平移指针。

        只有当前记录会在内存中同步平移；其他记录上经 set_memo 修改、
        尚未 write_record 的备注会使本调用抛出 RecordError。
        """
        self._ensure_open()
        if not isinstance(self.memo, WritableMemo):
            return None
        keys = {c.key for c in self.memo_columns()}
        if any(r is not self.record and r.dirty & keys for r in self._memo_edits):
            raise RecordError("存在尚未写入的备注修改，请先 write_record")
        event = self.memo.compact()
        if event:
            self.on_memo_blocks_delete(event)
        return event

    def on_memo_blocks_delete(self, event: MemoBlocksDeleted) -> int:
        return PointerRemapper(self).remap(event)

    # --- 整表操作 ---
    def pack(self) -> "WritableTable":
        self._ensure_open()
        Compactor(self).pack()

        if self._insertion and self.record is not None:
            self.record.index = self.record_pos = self.header.record_count
        else:
            self.record = None
            self.record_pos = -1

        if self.strategy.saves_immediately:
            self.save()
        return self

    def save(self) -> "WritableTable":
        self._ensure_open()
        # 1) 先定稿备注指针，文件头中的计数需与之一致
        writable_memo = self.memo if isinstance(self.memo, WritableMemo) else None
        if writable_memo is not None:
            event = writable_memo.flush()
            if event:
                self.on_memo_blocks_delete(event)

        # 2) 文件头
        self.header.last_update = date.today()
        HeaderWriter.write(self.fp, self.header)

        # 3) 文件结束标记
        self._ensure_end_of_file_marker()
        self.fp.flush()
        os.fsync(self.fp.fileno())

        # 4) clone 模式下替换原文件；表提交成功后才提交备注文件
        self.strategy.commit()
        if writable_memo is not None:
            writable_memo.commit()
        logger.info(f"保存表: {self.path}, 记录数={self.header.record_count}, 模式={self.edit_mode.value}")
        return self

    def _ensure_end_of_file_marker(self) -> None:
        """记录区之后恰好一个 0x1A，多余的尾部字节截掉。"""
        end = self.header.record_offset(self.header.record_count)
        self.fp.flush()
        self.fp.seek(end)
        if self.fp.read(1) != bytes([END_OF_FILE_MARKER]):
            self.fp.seek(end)
            self.fp.write(bytes([END_OF_FILE_MARKER]))
            logger.debug(f"补写文件结束标记: {self.path}")
        if self.cursor.size() != end + 1:
            self.fp.truncate(end + 1)
