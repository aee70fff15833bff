"""
工具函数模块
"""

import asyncio
from typing import Optional


async def wait_for_stop(stop_event: Optional[asyncio.Event], interval: float) -> bool:
    """
    等待一个周期

    Args:
        stop_event: 停止信号，可为 None
        interval: 周期（秒）

    Returns:
        True 表示周期内收到停止信号
    """
    if stop_event is None:
        await asyncio.sleep(interval)
        return False
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=interval)
    except asyncio.TimeoutError:
        return False
    return True


def format_window(seconds: float) -> str:
    """
    格式化时间窗口，如 30s / 1m30s / 2h

    不足一秒的部分舍去，最小显示 0s。
    """
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)
