"""
编辑模式策略：在副本上编辑(clone) 或 直接编辑原文件(realtime)
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class EditMode(str, Enum):
    # 所有修改作用于临时副本，调用 save 后才替换原文件
    CLONE = "clone"
    # 所有修改直接作用于原文件
    REALTIME = "realtime"


class EditStrategy(ABC):
    """决定修改落在哪个物理文件上，以及 save/close 时如何收尾。"""

    mode: EditMode
    # 追加写入与 pack 后是否立即 save
    saves_immediately: bool = False

    def __init__(self, path: str):
        self.source_path = path

    @abstractmethod
    def open(self) -> str:
        """准备工作文件，返回应以读写方式打开的路径。"""

    @abstractmethod
    def commit(self) -> None:
        """把工作文件的内容提交到原文件。"""

    @abstractmethod
    def release(self) -> None:
        """释放工作文件。"""


class WorkingCopyStrategy(EditStrategy):
    mode = EditMode.CLONE

    def __init__(self, path: str):
        super().__init__(path)
        self.working_path: Optional[str] = None

    def open(self) -> str:
        base = os.path.basename(self.source_path)
        fd, working = tempfile.mkstemp(prefix=f"{base}.", suffix=".clone")
        os.close(fd)
        try:
            shutil.copyfile(self.source_path, working)
        except OSError:
            os.unlink(working)
            raise
        self.working_path = working
        logger.info(f"创建工作副本: {self.source_path} -> {working}")
        return working

    def commit(self) -> None:
        if self.working_path is None:
            return
        # 先写到原文件同目录的临时文件，再原子替换
        target_dir = os.path.dirname(os.path.abspath(self.source_path))
        fd, staging = tempfile.mkstemp(dir=target_dir, suffix=".tmp")
        os.close(fd)
        try:
            shutil.copyfile(self.working_path, staging)
            shutil.copymode(self.source_path, staging)
            os.replace(staging, self.source_path)
        except OSError:
            if os.path.exists(staging):
                os.unlink(staging)
            raise
        logger.debug(f"工作副本已提交: {self.source_path}")

    def release(self) -> None:
        if self.working_path is None:
            return
        working, self.working_path = self.working_path, None
        try:
            os.unlink(working)
            logger.info(f"删除工作副本: {working}")
        except FileNotFoundError:
            logger.warning(f"工作副本已不存在: {working}")


class DirectStrategy(EditStrategy):
    mode = EditMode.REALTIME
    saves_immediately = True

    def open(self) -> str:
        return self.source_path

    def commit(self) -> None:
        pass

    def release(self) -> None:
        pass


def resolve_edit_mode(mode: Union[EditMode, str]) -> EditMode:
    try:
        return EditMode(mode)
    except ValueError:
        raise ValueError(f"编辑模式必须是 'clone' 或 'realtime'，而不是 {mode!r}") from None


def create_strategy(path: str, mode: Union[EditMode, str]) -> EditStrategy:
    if resolve_edit_mode(mode) is EditMode.CLONE:
        return WorkingCopyStrategy(path)
    return DirectStrategy(path)
