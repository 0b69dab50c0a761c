"""
新建空表（含备注文件）
"""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import List, Optional

from .constants import COLUMN_NAME_SIZE, END_OF_FILE_MARKER, MEMO_POINTER_LENGTH
from .header import Column, Header, HeaderWriter, assign_offsets, header_length_for
from .table_type import TableType, has_memo, is_foxpro
from ..memo import create_dbt
from ..utils.exceptions import HeaderError

logger = logging.getLogger(__name__)

# 固定宽度的列类型
_FIXED_LENGTHS = {"L": 1, "D": 8, "I": 4, "M": MEMO_POINTER_LENGTH}


class TableBuilder:

    def __init__(self, version: int = TableType.DBASE_III_PLUS_NOMEMO, language_code: int = 0):
        self.version = int(version)
        self.language_code = language_code
        self.columns: List[Column] = []

    def add_column(self, name: str, type: str, length: Optional[int] = None, decimal: int = 0) -> "TableBuilder":
        kind = type.upper()
        if length is None:
            if kind not in _FIXED_LENGTHS:
                raise HeaderError(f"列 {name} 需要指定长度")
            length = _FIXED_LENGTHS[kind]
        if not name or len(name) >= COLUMN_NAME_SIZE or not name.isascii():
            raise HeaderError(f"列名不合法: {name!r}")
        if any(c.key == name.lower() for c in self.columns):
            raise HeaderError(f"列名重复: {name}")
        if not 0 < length < 256:
            raise HeaderError(f"列 {name} 长度必须在 1..255 之间: {length}")
        self.columns.append(Column(name=name.upper(), type=kind, length=length, decimal=decimal))
        return self

    def build(self, path: str) -> str:
        if not self.columns:
            raise HeaderError("至少需要一列")
        backlink = is_foxpro(self.version)
        columns = [Column(c.name, c.type, c.length, c.decimal) for c in self.columns]
        header = Header(
            version=self.version,
            record_count=0,
            length=header_length_for(len(columns), backlink),
            record_byte_length=assign_offsets(columns),
            columns=columns,
            last_update=date.today(),
            language_code=self.language_code,
        )
        with open(path, "wb") as f:
            HeaderWriter.write_full(f, header, backlink=backlink)
            f.write(bytes([END_OF_FILE_MARKER]))

        if has_memo(self.version) and not is_foxpro(self.version):
            create_dbt(os.path.splitext(path)[0] + ".dbt")
        logger.info(f"新建表: {path}, 列数={len(columns)}, 记录长度={header.record_byte_length}")
        return path
