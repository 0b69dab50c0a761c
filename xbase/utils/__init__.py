"""
工具函数模块
"""

from .exceptions import *  # noqa: F401,F403
from .logging import *  # noqa: F401,F403
