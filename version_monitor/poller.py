"""
高频轮询循环

每隔 interval 秒拉取一次状态端点，提取标签写入聚合器。
拉取失败直接丢弃，本轮不记录观测，也不额外重试。
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .aggregator import TagAggregator
from .config import AppConfig
from .models import StatusResponse
from .utils import wait_for_stop

logger = logging.getLogger(__name__)


def extract_tag(payload: Any) -> str:
    """
    从状态端点响应中提取标签

    Raises:
        ValueError: 响应格式不合法
    """
    if not isinstance(payload, dict):
        raise ValueError(f"unexpected payload type: {type(payload).__name__}")
    try:
        return StatusResponse(**payload).message
    except ValidationError as e:
        raise ValueError(f"invalid status payload: {e}") from e


async def fetch_tag(client: httpx.AsyncClient, url: str) -> str:
    """
    拉取一次状态端点

    Args:
        client: 共享的 httpx 客户端（已配置超时）
        url: 状态端点地址

    Returns:
        标签字符串

    Raises:
        httpx.HTTPError: 请求失败
        ValueError: 响应解码失败
    """
    response = await client.get(url)
    response.raise_for_status()
    payload: Dict[str, Any] = response.json()
    return extract_tag(payload)


async def poll_once(
    client: httpx.AsyncClient,
    url: str,
    aggregator: TagAggregator
) -> Optional[str]:
    """执行一次轮询，成功返回标签，失败返回 None"""
    try:
        tag = await fetch_tag(client, url)
    except (httpx.HTTPError, ValueError) as e:
        logger.debug(f"Dropped poll of {url}: {e}")
        return None

    await aggregator.record(tag)
    return tag


async def run_poller(
    aggregator: TagAggregator,
    config: AppConfig,
    stop_event: Optional[asyncio.Event] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
):
    """
    运行轮询循环

    整个循环复用一个客户端；stop_event 置位后在下一次等待时退出。
    transport 仅用于测试注入。
    """
    url = config.poller.url
    interval = config.poller.interval
    timeout = config.poller.timeout

    logger.info(f"Starting poller loop (url={url}, interval={interval}s, timeout={timeout}s)")

    loop = asyncio.get_running_loop()

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        while stop_event is None or not stop_event.is_set():
            started = loop.time()
            try:
                await poll_once(client, url, aggregator)
            except asyncio.CancelledError:
                logger.info("Poller task cancelled")
                raise
            except Exception as e:
                logger.error(f"Poller loop error: {e}", exc_info=True)

            # 固定频率：扣除本轮耗时
            delay = max(0.0, interval - (loop.time() - started))
            if await wait_for_stop(stop_event, delay):
                break

    logger.info("Poller loop stopped")

