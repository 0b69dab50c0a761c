"""
记录模型与定长记录编解码
"""

from __future__ import annotations

import struct
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from .constants import RECORD_ACTIVE, RECORD_DELETED
from .header import Column
from ..utils.exceptions import RecordError


class Record:
    """一条定长记录：删除标记 + 列名到原始(genuine)值的映射。

    备注列的原始值是指向备注存储的整数指针，而不是备注内容本身。
    """

    def __init__(
        self,
        columns: Sequence[Column],
        index: int,
        deleted: bool = False,
        values: Optional[Dict[str, Any]] = None,
        raw: Optional[bytes] = None,
        memo_columns: Iterable[str] = (),
    ):
        self._columns = {c.key: c for c in columns}
        self._memo_columns: FrozenSet[str] = frozenset(name.lower() for name in memo_columns)
        self.index = index
        self._deleted = deleted
        self._values: Dict[str, Any] = dict(values) if values else {c.key: None for c in columns}
        # 最近一次读出/写入的字节，未修改的列按原字节写回
        self.raw = raw
        self.dirty: Set[str] = set()

    def __repr__(self) -> str:
        flag = "*" if self._deleted else " "
        return f"Record(index={self.index}, deleted={flag!r}, values={self._values!r})"

    def _column(self, name: str) -> Column:
        try:
            return self._columns[name.lower()]
        except KeyError:
            raise RecordError(f"未知列: {name}") from None

    # --- 删除标记 ---
    def is_deleted(self) -> bool:
        return self._deleted

    def set_deleted(self, deleted: bool) -> None:
        self._deleted = bool(deleted)

    # --- 列值 ---
    def get(self, name: str) -> Any:
        return self._values[self._column(name).key]

    def set(self, name: str, value: Any) -> None:
        column = self._column(name)
        if column.key in self._memo_columns:
            raise RecordError(f"备注列 {column.name} 需通过 set_memo 写入")
        self._values[column.key] = value
        self.dirty.add(column.key)

    def get_genuine(self, name: str) -> Any:
        return self._values[self._column(name).key]

    def set_genuine(self, name: str, value: Any) -> None:
        column = self._column(name)
        self._values[column.key] = value
        self.dirty.add(column.key)

    def mark_written(self, raw: bytes) -> None:
        self.raw = raw
        self.dirty.clear()


class RecordCodec:
    """Record <-> 定长字节缓冲区。"""

    def __init__(self, columns: List[Column], record_byte_length: int, encoding: str, memo_types: FrozenSet[str]):
        self.columns = columns
        self.record_byte_length = record_byte_length
        self.encoding = encoding
        self.memo_columns = frozenset(c.key for c in columns if c.type in memo_types)

    def blank(self, index: int) -> Record:
        return Record(self.columns, index, memo_columns=self.memo_columns)

    def from_bytes(self, index: int, data: bytes) -> Record:
        if len(data) != self.record_byte_length:
            raise RecordError(f"记录 {index} 长度不足: {len(data)} != {self.record_byte_length}")
        values = {}
        for column in self.columns:
            chunk = data[column.offset:column.offset + column.length]
            values[column.key] = self._decode(column, chunk)
        return Record(
            self.columns,
            index,
            deleted=data[0:1] == RECORD_DELETED,
            values=values,
            raw=bytes(data),
            memo_columns=self.memo_columns,
        )

    def to_bytes(self, record: Record) -> bytes:
        if record.raw is not None:
            buf = bytearray(record.raw)
            changed = record.dirty
        else:
            buf = bytearray(b" " * self.record_byte_length)
            changed = None
        buf[0:1] = RECORD_DELETED if record.is_deleted() else RECORD_ACTIVE
        for column in self.columns:
            if changed is not None and column.key not in changed:
                continue
            buf[column.offset:column.offset + column.length] = self._encode(column, record.get_genuine(column.name))
        return bytes(buf)

    # --- 按列类型编码 ---
    def _encode(self, column: Column, value: Any) -> bytes:
        if column.key in self.memo_columns:
            return self._encode_memo_pointer(column, value)
        kind = column.type
        if kind == "C":
            text = b"" if value is None else str(value).encode(self.encoding)
            return self._fit(column, text.ljust(column.length, b" "))
        if kind in ("N", "F"):
            if value is None:
                return b" " * column.length
            if column.decimal:
                text = f"{float(value):.{column.decimal}f}"
            else:
                text = str(int(value))
            return self._fit(column, text.encode("ascii").rjust(column.length, b" "))
        if kind == "L":
            if value is None:
                return b"?"
            return b"T" if value else b"F"
        if kind == "D":
            if value is None:
                return b" " * 8
            if isinstance(value, date):
                return value.strftime("%Y%m%d").encode("ascii")
            return self._fit(column, str(value).encode("ascii"))
        if kind == "I":
            return struct.pack("<i", 0 if value is None else int(value))
        # 其余类型按原始字节保存
        if value is None:
            return b" " * column.length
        return self._fit(column, bytes(value))

    def _encode_memo_pointer(self, column: Column, pointer: Optional[int]) -> bytes:
        if column.length == 4:
            return struct.pack("<I", pointer or 0)
        if not pointer:
            return b" " * column.length
        return self._fit(column, str(int(pointer)).encode("ascii").rjust(column.length, b" "))

    @staticmethod
    def _fit(column: Column, data: bytes) -> bytes:
        if len(data) != column.length:
            raise RecordError(f"列 {column.name} 的值超出宽度 {column.length}: {data!r}")
        return data

    # --- 按列类型解码 ---
    def _decode(self, column: Column, chunk: bytes) -> Any:
        if column.key in self.memo_columns:
            return self._decode_memo_pointer(chunk)
        kind = column.type
        if kind == "C":
            return chunk.decode(self.encoding).rstrip(" \x00")
        if kind in ("N", "F"):
            text = chunk.strip(b" \x00")
            if not text or text.strip(b"*") == b"":
                return None
            try:
                if b"." in text or column.decimal:
                    return float(text)
                return int(text)
            except ValueError:
                raise RecordError(f"列 {column.name} 不是合法数字: {chunk!r}") from None
        if kind == "L":
            if chunk in (b"T", b"t", b"Y", b"y"):
                return True
            if chunk in (b"F", b"f", b"N", b"n"):
                return False
            return None
        if kind == "D":
            text = chunk.strip(b" \x00")
            if not text:
                return None
            try:
                return date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
            except ValueError:
                raise RecordError(f"列 {column.name} 不是合法日期: {chunk!r}") from None
        if kind == "I":
            return struct.unpack("<i", chunk)[0]
        return bytes(chunk)

    @staticmethod
    def _decode_memo_pointer(chunk: bytes) -> Optional[int]:
        if len(chunk) == 4:
            pointer = struct.unpack("<I", chunk)[0]
        else:
            text = chunk.strip(b" \x00")
            if not text:
                return None
            try:
                pointer = int(text)
            except ValueError:
                raise RecordError(f"备注指针不合法: {chunk!r}") from None
        return pointer or None
