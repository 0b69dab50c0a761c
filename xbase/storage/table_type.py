"""
表版本与备注列类型对照表
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, FrozenSet


class TableType(IntEnum):
    DBASE_II = 0x02
    DBASE_III_PLUS_NOMEMO = 0x03
    VISUAL_FOXPRO = 0x30
    VISUAL_FOXPRO_AI = 0x31
    VISUAL_FOXPRO_VAR = 0x32
    DBASE_IV_SQL_TABLE_NOMEMO = 0x43
    DBASE_IV_SQL_SYSTEM_NOMEMO = 0x63
    DBASE_III_PLUS_MEMO = 0x83
    DBASE_IV_MEMO = 0x8B
    DBASE_IV_SQL_TABLE_MEMO = 0xCB
    FOXPRO_MEMO = 0xF5
    FOXBASE = 0xFB


_DBASE_MEMO_TYPES = frozenset({"M"})
_FOXPRO_MEMO_TYPES = frozenset({"M", "G", "P"})

# 版本 -> 该版本中保存为备注指针的列类型
_MEMO_TYPES: Dict[int, FrozenSet[str]] = {
    TableType.DBASE_III_PLUS_MEMO: _DBASE_MEMO_TYPES,
    TableType.DBASE_IV_MEMO: _DBASE_MEMO_TYPES,
    TableType.DBASE_IV_SQL_TABLE_MEMO: _DBASE_MEMO_TYPES,
    TableType.FOXPRO_MEMO: _FOXPRO_MEMO_TYPES,
    TableType.VISUAL_FOXPRO: _FOXPRO_MEMO_TYPES,
    TableType.VISUAL_FOXPRO_AI: _FOXPRO_MEMO_TYPES,
    TableType.VISUAL_FOXPRO_VAR: _FOXPRO_MEMO_TYPES,
}


def has_memo(version: int) -> bool:
    return version in _MEMO_TYPES


def memo_types(version: int) -> FrozenSet[str]:
    """返回该版本的备注列类型集合；无备注支持时为空集。"""
    return _MEMO_TYPES.get(version, frozenset())


def is_foxpro(version: int) -> bool:
    return version in (
        TableType.FOXPRO_MEMO,
        TableType.VISUAL_FOXPRO,
        TableType.VISUAL_FOXPRO_AI,
        TableType.VISUAL_FOXPRO_VAR,
        TableType.FOXBASE,
    )
