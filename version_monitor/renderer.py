"""
终端柱状图绘制

按固定周期从聚合器取快照，重绘“各版本在窗口内出现次数”的横向柱状图。
绘制与轮询互不通信，只读取快照副本。
"""

import asyncio
import logging
import shutil
import sys
from typing import List, Optional, TextIO

from .aggregator import TagAggregator
from .config import AppConfig
from .models import Snapshot
from .utils import format_window, wait_for_stop

logger = logging.getLogger(__name__)

BAR_CHAR = "█"
LABEL_MAX_WIDTH = 24
COLOR_TITLE = 33   # yellow
COLOR_BAR = 34     # blue
COLOR_COUNT = 97   # white


def color_enabled(color_mode: str, stream: TextIO) -> bool:
    if color_mode == "on":
        return True
    if color_mode == "off":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def clip(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= 1:
        return text[:width]
    return text[: width - 1] + "…"


def _label(tag: str) -> str:
    return tag if tag else "(empty)"


def _paint(text: str, code: int, use_color: bool) -> str:
    if not use_color:
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def build_chart(
    snapshot: Snapshot,
    window_seconds: float,
    width: int = 80,
    height: Optional[int] = None,
    use_color: bool = False
) -> List[str]:
    """
    将快照转换为柱状图文本行

    Args:
        snapshot: 按标签升序的计数列表
        window_seconds: 窗口长度（用于标题）
        width: 可用列数
        height: 可用行数，None 表示不限
        use_color: 是否输出 ANSI 颜色

    Returns:
        文本行列表（不含换行符）
    """
    title = f"Versions (seen in last {format_window(window_seconds)})"
    lines = [_paint(clip(title, width), COLOR_TITLE, use_color), ""]

    if not snapshot:
        lines.append(clip("(no observations)", width))
    else:
        # 标签最多占三分之一宽度
        label_width = min(
            LABEL_MAX_WIDTH,
            max(1, width // 3),
            max(len(_label(item.tag)) for item in snapshot)
        )
        max_count = max(item.count for item in snapshot)
        count_width = len(str(max_count))
        # 标签 + 空格 + 柱 + 空格 + 计数
        bar_width = width - label_width - count_width - 2

        for item in snapshot:
            label = clip(_label(item.tag), label_width)
            if bar_width < 1:
                # 宽度不足以画柱，只保留标签与计数
                lines.append(clip(f"{label} {item.count}", width))
                continue
            fill = int(item.count / max_count * bar_width) if max_count else 0
            bar = BAR_CHAR * max(1 if item.count else 0, fill)
            lines.append(
                f"{label:<{label_width}} "
                f"{_paint(bar.ljust(bar_width), COLOR_BAR, use_color)} "
                f"{_paint(str(item.count).rjust(count_width), COLOR_COUNT, use_color)}"
            )

    total = sum(item.count for item in snapshot)
    lines.append("")
    lines.append(clip(f"{len(snapshot)} tags, {total} observations", width))

    if height is not None and height > 0:
        lines = lines[:height]
    return lines


def render(lines: List[str], stream: TextIO):
    """清屏并输出"""
    stream.write("\x1b[2J\x1b[H")
    stream.write("\n".join(lines))
    stream.write("\n")
    stream.flush()


async def run_renderer(
    aggregator: TagAggregator,
    config: AppConfig,
    stream: Optional[TextIO] = None,
    stop_event: Optional[asyncio.Event] = None
):
    """
    运行绘制循环

    周期独立于轮询；每次只持锁取快照，绘制在锁外完成。
    """
    out = stream if stream is not None else sys.stdout
    interval = config.renderer.interval
    window = config.window.seconds
    use_color = color_enabled(config.renderer.color, out)

    logger.info(f"Starting renderer loop (interval={interval}s, window={window}s)")

    loop = asyncio.get_running_loop()

    while stop_event is None or not stop_event.is_set():
        started = loop.time()
        try:
            snapshot = await aggregator.snapshot(window)
            size = shutil.get_terminal_size((config.renderer.width, 24))
            width = min(config.renderer.width, size.columns)
            render(build_chart(snapshot, window, width, size.lines - 1, use_color), out)
        except asyncio.CancelledError:
            logger.info("Renderer task cancelled")
            raise
        except Exception as e:
            logger.error(f"Renderer loop error: {e}", exc_info=True)

        delay = max(0.0, interval - (loop.time() - started))
        if await wait_for_stop(stop_event, delay):
            break

    logger.info("Renderer loop stopped")
