"""
dBase III 备注文件(.dbt)

块 0 为文件头，前 4 字节是下一个空闲块号(小端)。
每条备注从块边界开始，以 0x1A 0x1A 结束，占用 ceil((len+2)/512) 个块。
指针即块号。
"""

from __future__ import annotations

import logging
import os
import struct
from typing import BinaryIO, Dict, Optional, Union

from .base import MemoBlocksDeleted, WritableMemo
from ..storage.constants import END_OF_FILE_MARKER, MEMO_BLOCK_SIZE, MEMO_TERMINATOR
from ..storage.edit_mode import EditStrategy
from ..utils.exceptions import MemoError

logger = logging.getLogger(__name__)

_NEXT_FREE_FMT = "<I"


def blocks_for(size: int) -> int:
    return max(1, -(-size // MEMO_BLOCK_SIZE))


def create_dbt(path: str) -> None:
    """新建只有文件头块的空备注文件。"""
    block = bytearray(MEMO_BLOCK_SIZE)
    struct.pack_into(_NEXT_FREE_FMT, block, 0, 1)
    with open(path, "wb") as f:
        f.write(block)


class DBase3Memo(WritableMemo):

    def __init__(self, path: str, encoding: str, strategy: Optional[EditStrategy] = None):
        self.path = path
        self.encoding = encoding
        self.strategy = strategy
        self.fp: Optional[BinaryIO] = None
        # 待回收: 起始块号 -> 块数
        self._pending: Dict[int, int] = {}
        if strategy is None:
            self.fp = open(path, "rb")
        else:
            try:
                self.fp = open(strategy.open(), "r+b")
            except OSError:
                strategy.release()
                raise
        self.fp.seek(0)
        head = self.fp.read(4)
        if len(head) != 4:
            self.close()
            raise MemoError(f"备注文件头被截断: {path}")
        (self.next_free,) = struct.unpack(_NEXT_FREE_FMT, head)

    @property
    def writable(self) -> bool:
        return self.strategy is not None

    # --- 读 ---
    def _read_raw(self, pointer: int) -> bytes:
        if pointer <= 0 or pointer >= self.next_free:
            raise MemoError(f"备注指针越界: {pointer} (下一空闲块={self.next_free})")
        self.fp.seek(pointer * MEMO_BLOCK_SIZE)
        out = bytearray()
        while True:
            chunk = self.fp.read(MEMO_BLOCK_SIZE)
            if not chunk:
                break
            end = chunk.find(bytes([END_OF_FILE_MARKER]))
            if end >= 0:
                out += chunk[:end]
                break
            out += chunk
        return bytes(out)

    def get(self, pointer: int) -> Optional[str]:
        if not pointer:
            return None
        return self._read_raw(pointer).decode(self.encoding)

    def block_count(self, pointer: int) -> int:
        return blocks_for(len(self._read_raw(pointer)) + len(MEMO_TERMINATOR))

    # --- 写 ---
    def _check_writable(self) -> None:
        if not self.writable:
            raise MemoError(f"备注文件以只读方式打开: {self.path}")

    def allocate(self, content: Union[str, bytes]) -> int:
        self._check_writable()
        data = content.encode(self.encoding) if isinstance(content, str) else bytes(content)
        if bytes([END_OF_FILE_MARKER]) in data:
            raise MemoError("备注内容不能包含 0x1A")
        data += MEMO_TERMINATOR
        blocks = blocks_for(len(data))
        pointer = self.next_free
        self.fp.seek(pointer * MEMO_BLOCK_SIZE)
        self.fp.write(data.ljust(blocks * MEMO_BLOCK_SIZE, b"\x00"))
        self.next_free += blocks
        self._write_header()
        logger.debug(f"分配备注块: 指针={pointer}, 块数={blocks}")
        return pointer

    def delete(self, pointer: int) -> None:
        self._check_writable()
        if pointer in self._pending:
            return
        self._pending[pointer] = self.block_count(pointer)
        logger.debug(f"标记备注块待回收: 指针={pointer}")

    def compact(self) -> Optional[MemoBlocksDeleted]:
        self._check_writable()
        if not self._pending:
            return None
        deleted = sorted(self._pending.items())
        write_block = deleted[0][0]
        for i, (start, length) in enumerate(deleted):
            segment_start = start + length
            segment_end = deleted[i + 1][0] if i + 1 < len(deleted) else self.next_free
            if segment_end < segment_start:
                raise MemoError(f"备注块重叠: {start}+{length} > {segment_end}")
            # 目标位置总在源位置之前，顺序前移不会覆盖未读数据
            for block in range(segment_start, segment_end):
                self.fp.seek(block * MEMO_BLOCK_SIZE)
                chunk = self.fp.read(MEMO_BLOCK_SIZE)
                self.fp.seek(write_block * MEMO_BLOCK_SIZE)
                self.fp.write(chunk)
                write_block += 1
        reclaimed = self.next_free - write_block
        self.next_free = write_block
        self.fp.truncate(self.next_free * MEMO_BLOCK_SIZE)
        self._write_header()
        event = MemoBlocksDeleted(dict(deleted))
        self._pending.clear()
        logger.info(f"备注文件回收: {len(deleted)} 段, 共 {reclaimed} 块")
        return event

    def flush(self) -> Optional[MemoBlocksDeleted]:
        self._check_writable()
        event = self.compact()
        self.fp.flush()
        os.fsync(self.fp.fileno())
        return event

    def commit(self) -> None:
        self._check_writable()
        self.strategy.commit()

    def _write_header(self) -> None:
        self.fp.seek(0)
        self.fp.write(struct.pack(_NEXT_FREE_FMT, self.next_free))
        self.fp.flush()

    def close(self) -> None:
        if self.fp is not None:
            self.fp.close()
            self.fp = None
        if self.strategy is not None:
            self.strategy.release()
