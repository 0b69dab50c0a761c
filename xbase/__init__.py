"""
xbase：定长记录表文件(.dbf)及其备注文件(.dbt)的读写引擎
"""

from .storage import (
    Column,
    EditMode,
    Record,
    Table,
    TableBuilder,
    TableType,
    WritableTable,
)
from .memo import MemoBlocksDeleted
from .utils.exceptions import (
    XBaseError,
    HeaderError,
    RecordError,
    MemoError,
    UnsupportedMemoFormatError,
    TableClosedError,
)

__version__ = "0.1.0"

__all__ = [
    'Column',
    'EditMode',
    'Record',
    'Table',
    'TableBuilder',
    'TableType',
    'WritableTable',
    'MemoBlocksDeleted',
    'XBaseError',
    'HeaderError',
    'RecordError',
    'MemoError',
    'UnsupportedMemoFormatError',
    'TableClosedError',
]
