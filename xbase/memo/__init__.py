"""
备注存储模块
"""

from __future__ import annotations

import os
from typing import Optional

from .base import Memo, MemoBlocksDeleted, WritableMemo
from .dbt import DBase3Memo, create_dbt
from ..storage.edit_mode import EditStrategy, create_strategy
from ..storage.table_type import is_foxpro
from ..utils.exceptions import MemoError, UnsupportedMemoFormatError

__all__ = [
    'Memo',
    'WritableMemo',
    'MemoBlocksDeleted',
    'DBase3Memo',
    'create_dbt',
    'find_memo_path',
    'open_memo',
]


def find_memo_path(table_path: str) -> Optional[str]:
    """在表文件旁查找同名的 .dbt/.DBT 文件。"""
    stem, _ = os.path.splitext(table_path)
    for ext in (".dbt", ".DBT"):
        if os.path.exists(stem + ext):
            return stem + ext
    return None


def open_memo(
    table_path: str,
    version: int,
    encoding: str,
    memo_path: Optional[str] = None,
    edit_mode: Optional[str] = None,
) -> Memo:
    """按表版本打开备注存储；edit_mode 为 None 时只读打开。"""
    if is_foxpro(version):
        raise UnsupportedMemoFormatError(f"暂不支持该版本的备注文件: 0x{version:02X}")
    path = memo_path or find_memo_path(table_path)
    if path is None or not os.path.exists(path):
        raise MemoError(f"找不到备注文件: {table_path}")
    strategy: Optional[EditStrategy] = None
    if edit_mode is not None:
        strategy = create_strategy(path, edit_mode)
    return DBase3Memo(path, encoding, strategy)
