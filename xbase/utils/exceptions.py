"""
自定义异常类
"""


class XBaseError(Exception):
    """通用表文件错误。"""


class HeaderError(XBaseError):
    """文件头损坏或不一致。"""


class RecordError(XBaseError):
    """记录定位或列值编码错误。"""


class MemoError(XBaseError):
    """备注(memo)存储错误。"""


class UnsupportedMemoFormatError(MemoError):
    """该版本的备注文件格式尚未实现。"""


class TableClosedError(XBaseError):
    """表已关闭。"""


__all__ = [
    "XBaseError",
    "HeaderError",
    "RecordError",
    "MemoError",
    "UnsupportedMemoFormatError",
    "TableClosedError",
]
