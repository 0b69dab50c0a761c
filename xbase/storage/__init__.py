"""
存储模块
"""

from .constants import *
from .edit_mode import EditMode, WorkingCopyStrategy, DirectStrategy, create_strategy
from .header import Column, Header, HeaderReader, HeaderWriter
from .record import Record, RecordCodec
from .cursor import RecordCursor
from .table_type import TableType, has_memo, memo_types
from .table import Table
from .writable_table import WritableTable
from .compactor import Compactor
from .remapper import PointerRemapper
from .builder import TableBuilder

__all__ = [
    'EditMode',
    'WorkingCopyStrategy',
    'DirectStrategy',
    'create_strategy',
    'Column',
    'Header',
    'HeaderReader',
    'HeaderWriter',
    'Record',
    'RecordCodec',
    'RecordCursor',
    'TableType',
    'has_memo',
    'memo_types',
    'Table',
    'WritableTable',
    'Compactor',
    'PointerRemapper',
    'TableBuilder',
    'END_OF_FILE_MARKER',
    'DEFAULT_EDIT_MODE',
    'DEFAULT_ENCODING',
]
