"""
只读表：打开文件、解析文件头、按下标定位记录
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator, List, Optional

from .constants import DEFAULT_ENCODING
from .cursor import RecordCursor
from .header import Column, Header, HeaderReader
from .record import Record, RecordCodec
from .table_type import has_memo, memo_types
from ..memo import Memo, open_memo
from ..utils.exceptions import RecordError, TableClosedError

logger = logging.getLogger(__name__)


class Table:
    """只读访问一个表文件；写操作见 WritableTable。"""

    def __init__(self, path: str, encoding: str = DEFAULT_ENCODING, memo_path: Optional[str] = None):
        self.path = path
        self.encoding = encoding
        self.memo_path = memo_path
        self.fp: Optional[BinaryIO] = None
        self.header: Optional[Header] = None
        self.memo: Optional[Memo] = None
        # 当前记录；None 表示“没有当前记录”
        self.record: Optional[Record] = None
        self.record_pos = -1
        try:
            self.open()
            self.header = HeaderReader.read(self.fp)
            self.cursor = RecordCursor(self.fp, self.header)
            self.codec = RecordCodec(self.header.columns, self.header.record_byte_length, encoding, memo_types(self.version))
            self.open_memo()
        except BaseException:
            self.close()
            raise
        logger.info(f"打开表: {path}, 版本=0x{self.version:02X}, 记录数={self.header.record_count}")

    def open(self) -> None:
        self.fp = open(self.path, "rb")

    def open_memo(self) -> None:
        if has_memo(self.version):
            self.memo = open_memo(self.path, self.version, self.encoding, self.memo_path)

    def close(self) -> None:
        if self.memo is not None:
            self.memo.close()
            self.memo = None
        if self.fp is not None:
            self.fp.close()
            self.fp = None
        self.record = None
        self.record_pos = -1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self.fp is None

    def _ensure_open(self) -> None:
        if self.fp is None:
            raise TableClosedError(f"表已关闭: {self.path}")

    # --- 元信息 ---
    @property
    def version(self) -> int:
        return self.header.version

    @property
    def record_count(self) -> int:
        return self.header.record_count

    @property
    def columns(self) -> List[Column]:
        return self.header.columns

    def get_column(self, name: str) -> Column:
        for column in self.header.columns:
            if column.key == name.lower():
                return column
        raise RecordError(f"未知列: {name}")

    def memo_columns(self) -> List[Column]:
        kinds = memo_types(self.version)
        return [c for c in self.header.columns if c.type in kinds]

    # --- 记录定位 ---
    def pick_record(self, index: int) -> Record:
        """读取记录但不改变当前位置。"""
        self._ensure_open()
        if index < 0 or index >= self.header.record_count:
            raise RecordError(f"记录下标越界: {index} (记录数={self.header.record_count})")
        return self.codec.from_bytes(index, self.cursor.read(index))

    def move_to(self, index: int) -> Record:
        self.record = self.pick_record(index)
        self.record_pos = index
        return self.record

    def next_record(self) -> Optional[Record]:
        if self.record_pos + 1 >= self.header.record_count:
            self.record = None
            self.record_pos = self.header.record_count
            return None
        return self.move_to(self.record_pos + 1)

    def records(self, include_deleted: bool = True) -> Iterator[Record]:
        """顺序扫描全部记录。"""
        for index in range(self.header.record_count):
            record = self.pick_record(index)
            if record.is_deleted() and not include_deleted:
                continue
            yield record

    def get_memo(self, record: Record, name: str) -> Optional[str]:
        column = self.get_column(name)
        if self.memo is None or column.type not in memo_types(self.version):
            raise RecordError(f"{column.name} 不是备注列")
        pointer = record.get_genuine(column.name)
        if not pointer:
            return None
        return self.memo.get(pointer)
