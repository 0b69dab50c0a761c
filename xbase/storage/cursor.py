"""
记录游标：按逻辑下标定位定长记录并读写字节
"""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

from .header import Header
from ..utils.exceptions import RecordError

logger = logging.getLogger(__name__)


class RecordCursor:
    """记录 i 的字节偏移 = header.length + i * header.record_byte_length"""

    def __init__(self, fp: BinaryIO, header: Header):
        self.fp = fp
        self.header = header

    def offset(self, index: int) -> int:
        return self.header.record_offset(index)

    def read(self, index: int) -> bytes:
        self.fp.seek(self.offset(index))
        data = self.fp.read(self.header.record_byte_length)
        if len(data) != self.header.record_byte_length:
            raise RecordError(f"读取记录 {index} 失败: 文件被截断")
        return data

    def write(self, index: int, data: bytes) -> None:
        if len(data) != self.header.record_byte_length:
            raise RecordError(f"记录长度错误: {len(data)} != {self.header.record_byte_length}")
        self.fp.seek(self.offset(index))
        self.fp.write(data)
        self.fp.flush()
        logger.debug(f"写入记录: 下标={index}, 偏移={self.offset(index)}")

    def write_byte(self, index: int, value: bytes) -> None:
        """只覆写记录首字节（删除标记）。"""
        self.fp.seek(self.offset(index))
        self.fp.write(value[:1])
        self.fp.flush()

    def truncate_to(self, record_count: int) -> int:
        size = self.offset(record_count)
        self.fp.truncate(size)
        self.fp.flush()
        return size

    def size(self) -> int:
        self.fp.flush()
        return os.fstat(self.fp.fileno()).st_size
