"""
时间窗口计数聚合器

轮询任务写入观测，绘制任务读取快照，二者只通过本模块交互。
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

from .models import Snapshot, TagCount

logger = logging.getLogger(__name__)


class TagAggregator:
    """
    按标签记录观测时间戳，并在读取时清理窗口外的数据

    内部状态：{tag: [t1, t2, ...]}，每个桶内时间戳单调不减。
    所有读写都持有同一把锁，record 与 snapshot（含清理）互不交错。
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._buckets: Dict[str, List[float]] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    async def record(self, tag: str) -> float:
        """
        记录一次观测

        Args:
            tag: 标签（空字符串也是合法标签）

        Returns:
            实际写入的时间戳
        """
        async with self._lock:
            now = self._clock()
            bucket = self._buckets.setdefault(tag, [])
            # 时钟回拨时钳制到桶尾，保持桶内有序
            if bucket and now < bucket[-1]:
                now = bucket[-1]
            bucket.append(now)
            return now

    async def prune(self, window: float, now: Optional[float] = None) -> int:
        """
        清理窗口外的观测

        Args:
            window: 窗口长度（秒）
            now: 参考时间，默认取当前时钟

        Returns:
            被清理的观测数量
        """
        async with self._lock:
            if now is None:
                now = self._clock()
            return self._prune_locked(window, now)

    async def snapshot(self, window: float) -> Snapshot:
        """
        获取窗口内各标签计数

        先清理再计数，结果按标签升序，与内部状态无共享。
        """
        async with self._lock:
            now = self._clock()
            expired = self._prune_locked(window, now)
            if expired:
                logger.debug(f"Pruned {expired} expired observations")
            return [
                TagCount(tag=tag, count=len(self._buckets[tag]))
                for tag in sorted(self._buckets)
            ]

    async def tags(self) -> List[str]:
        """获取当前所有标签（不清理）"""
        async with self._lock:
            return sorted(self._buckets)

    async def total(self) -> int:
        """获取当前观测总数（不清理）"""
        async with self._lock:
            return sum(len(bucket) for bucket in self._buckets.values())

    def _prune_locked(self, window: float, now: float) -> int:
        cutoff = now - window
        expired = 0

        for tag in list(self._buckets):
            bucket = self._buckets[tag]

            # 从最新往回找第一个不晚于 cutoff 的位置，只截掉旧端
            for i in range(len(bucket) - 1, -1, -1):
                if bucket[i] <= cutoff:
                    expired += i + 1
                    del bucket[:i + 1]
                    break

            if not bucket:
                del self._buckets[tag]

        return expired
