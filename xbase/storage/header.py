"""
文件头模型与二进制读写

文件头布局（小端）：
  version(1) | last_update YMD(3) | record_count(uint32) | header_length(uint16)
  | record_byte_length(uint16) | reserved(17) | language_code(1) | reserved(2)
  之后每列 32 字节描述项，以 0x0D 结束；Visual FoxPro 另有 263 字节 backlink 区。
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import date
from typing import BinaryIO, List, Optional

from .constants import (
    COLUMN_DESCRIPTOR_SIZE,
    COLUMN_NAME_SIZE,
    HEADER_PREFIX_SIZE,
    HEADER_TERMINATOR,
)
from ..utils.exceptions import HeaderError

_PREFIX_FMT = "<B3BIHH"  # version | yy mm dd | record_count | header_length | record_byte_length
_PREFIX_SIZE = struct.calcsize(_PREFIX_FMT)
_LANGUAGE_CODE_OFFSET = 29
_VFP_BACKLINK_SIZE = 263


@dataclass
class Column:
    name: str
    type: str
    length: int
    decimal: int = 0
    # 在记录缓冲区中的字节偏移（第 0 字节为删除标记）
    offset: int = 0

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass
class Header:
    version: int
    record_count: int
    length: int
    record_byte_length: int
    columns: List[Column] = field(default_factory=list)
    last_update: Optional[date] = None
    language_code: int = 0

    def record_offset(self, index: int) -> int:
        return self.length + index * self.record_byte_length


def assign_offsets(columns: List[Column]) -> int:
    """按列顺序计算每列偏移，返回记录总长度。"""
    offset = 1
    for column in columns:
        column.offset = offset
        offset += column.length
    return offset


class HeaderReader:

    @staticmethod
    def read(fp: BinaryIO) -> Header:
        fp.seek(0)
        prefix = fp.read(HEADER_PREFIX_SIZE)
        if len(prefix) != HEADER_PREFIX_SIZE:
            raise HeaderError("文件头被截断")
        version, yy, mm, dd, record_count, length, record_byte_length = struct.unpack_from(_PREFIX_FMT, prefix, 0)
        try:
            last_update = date(1900 + yy, mm, dd)
        except ValueError:
            last_update = None

        columns: List[Column] = []
        while True:
            if fp.tell() >= length:
                raise HeaderError("列描述区缺少结束标记 0x0D")
            first = fp.read(1)
            if not first:
                raise HeaderError("列描述区被截断")
            if first[0] == HEADER_TERMINATOR:
                break
            rest = fp.read(COLUMN_DESCRIPTOR_SIZE - 1)
            if len(rest) != COLUMN_DESCRIPTOR_SIZE - 1:
                raise HeaderError("列描述区被截断")
            columns.append(HeaderReader._read_column(first + rest))

        total = assign_offsets(columns)
        if total != record_byte_length:
            raise HeaderError(f"记录长度不一致: 头部={record_byte_length}, 列合计={total}")

        return Header(
            version=version,
            record_count=record_count,
            length=length,
            record_byte_length=record_byte_length,
            columns=columns,
            last_update=last_update,
            language_code=prefix[_LANGUAGE_CODE_OFFSET],
        )

    @staticmethod
    def _read_column(raw: bytes) -> Column:
        name = raw[:COLUMN_NAME_SIZE].split(b"\x00", 1)[0].decode("ascii", errors="replace").strip()
        return Column(name=name, type=chr(raw[11]).upper(), length=raw[16], decimal=raw[17])


class HeaderWriter:

    @staticmethod
    def write(fp: BinaryIO, header: Header) -> None:
        """只覆写可变的前 12 字节，列描述区保持不变。"""
        fp.seek(0)
        fp.write(HeaderWriter._pack_prefix(header))

    @staticmethod
    def write_full(fp: BinaryIO, header: Header, backlink: bool = False) -> None:
        """写出完整文件头（新建表时使用）。"""
        buf = bytearray(HEADER_PREFIX_SIZE)
        buf[:_PREFIX_SIZE] = HeaderWriter._pack_prefix(header)
        buf[_LANGUAGE_CODE_OFFSET] = header.language_code
        for column in header.columns:
            desc = bytearray(COLUMN_DESCRIPTOR_SIZE)
            name = column.name.upper().encode("ascii")
            desc[:len(name)] = name
            desc[11] = ord(column.type)
            struct.pack_into("<I", desc, 12, column.offset)
            desc[16] = column.length
            desc[17] = column.decimal
            buf += desc
        buf.append(HEADER_TERMINATOR)
        if backlink:
            buf += bytes(_VFP_BACKLINK_SIZE)
        if len(buf) != header.length:
            raise HeaderError(f"文件头长度不一致: 声明={header.length}, 实际={len(buf)}")
        fp.seek(0)
        fp.write(buf)

    @staticmethod
    def _pack_prefix(header: Header) -> bytes:
        updated = header.last_update or date.today()
        return struct.pack(
            _PREFIX_FMT,
            header.version,
            updated.year - 1900,
            updated.month,
            updated.day,
            header.record_count,
            header.length,
            header.record_byte_length,
        )


def header_length_for(column_count: int, backlink: bool = False) -> int:
    size = HEADER_PREFIX_SIZE + column_count * COLUMN_DESCRIPTOR_SIZE + 1
    if backlink:
        size += _VFP_BACKLINK_SIZE
    return size
