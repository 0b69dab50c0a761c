"""
备注(memo)存储接口
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class MemoBlocksDeleted:
    """备注存储回收块后发回给表的事件：被删块起始指针 -> 回收长度。"""

    blocks: Dict[int, int] = field(default_factory=dict)

    def shift_for(self, pointer: int) -> int:
        """位于 pointer 之前（严格小于）的被删块长度之和。"""
        return sum(length for start, length in self.blocks.items() if pointer > start)

    def __bool__(self) -> bool:
        return bool(self.blocks)


class Memo(ABC):

    @abstractmethod
    def get(self, pointer: int) -> Optional[str]:
        """读取指针处的备注内容。"""

    @abstractmethod
    def close(self) -> None:
        ...


class WritableMemo(Memo):

    @abstractmethod
    def allocate(self, content: Union[str, bytes]) -> int:
        """写入新备注，返回其指针。"""

    @abstractmethod
    def delete(self, pointer: int) -> None:
        """标记指针处的备注块待回收。"""

    @abstractmethod
    def compact(self) -> Optional[MemoBlocksDeleted]:
        """物理回收已标记的块；没有可回收的块时返回 None。"""

    @abstractmethod
    def flush(self) -> Optional[MemoBlocksDeleted]:
        """回收并落盘到工作文件，返回回收事件。"""

    @abstractmethod
    def commit(self) -> None:
        """把工作文件提交到原文件。"""

    def save(self) -> Optional[MemoBlocksDeleted]:
        event = self.flush()
        self.commit()
        return event
