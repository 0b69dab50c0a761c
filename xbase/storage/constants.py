"""
表文件格式常量定义
"""

# --- 文件结构常量 ---
END_OF_FILE_MARKER = 0x1A  # 文件结束标记
HEADER_TERMINATOR = 0x0D   # 列描述区结束标记
HEADER_PREFIX_SIZE = 32    # 文件头固定部分大小
COLUMN_DESCRIPTOR_SIZE = 32  # 每个列描述项大小
COLUMN_NAME_SIZE = 11

# --- 记录标记 ---
RECORD_ACTIVE = b" "   # 行状态：活跃
RECORD_DELETED = b"*"  # 行状态：已删除

# --- 备注文件常量 ---
MEMO_BLOCK_SIZE = 512
MEMO_TERMINATOR = b"\x1a\x1a"
MEMO_POINTER_LENGTH = 10

# --- 默认选项 ---
DEFAULT_EDIT_MODE = "clone"
DEFAULT_ENCODING = "cp1252"

# --- 日志配置 ---
LOG_LEVEL = "INFO"     # 日志级别：DEBUG, INFO, WARNING, ERROR
