"""
主程序入口

dashboard：启动两个并发任务
1. 高频轮询循环（写入聚合器）
2. 低频绘制循环（读取快照并重绘）

serve：启动配套的状态端点服务
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from . import __version__
from .aggregator import TagAggregator
from .config import AppConfig, load_config, set_config
from .fortunes import FortuneError, load_fortunes
from .poller import run_poller
from .renderer import run_renderer
from .server import run_server

logger = logging.getLogger(__name__)


def setup_logging(config: AppConfig):
    """
    配置日志

    面板模式下 stdout 用于绘图，日志统一写 stderr。
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    level = getattr(logging, config.logging.level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True
    )

    if config.logging.file:
        log_path = Path(config.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(log_format))
        logging.getLogger().addHandler(file_handler)

    # 降低第三方库日志级别
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def parse_addr(addr: str):
    """解析 HOST:PORT，HOST 为空时监听所有地址"""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"invalid address (expected HOST:PORT): {addr}")
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="version-monitor",
        description="Live terminal chart of versions reported by a polled status endpoint."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    dash = sub.add_parser("dashboard", help="poll an endpoint and draw the live chart (default)")
    dash.add_argument("--config", default=None, help="path to config.yaml")
    dash.add_argument("--url", default=None, help="status endpoint address")
    dash.add_argument("--window", type=float, default=None, help="counting window in seconds")
    dash.add_argument("--poll-interval", type=float, default=None, help="poll interval in seconds")
    dash.add_argument("--render-interval", type=float, default=None, help="redraw interval in seconds")
    dash.add_argument("--color", choices=["auto", "on", "off"], default=None)

    serve = sub.add_parser("serve", help="run the status endpoint")
    serve.add_argument("--config", default=None, help="path to config.yaml")
    serve.add_argument("--addr", default=None, help="listen address, HOST:PORT")
    serve.add_argument("--message", default=None, help="fixed message to report")
    serve.add_argument("--fortunes-dir", default=None, help="report random fortunes from this directory")

    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """命令行参数覆盖配置文件，返回重新校验后的配置"""
    data = config.model_dump()

    if args.command == "serve":
        if args.addr is not None:
            data["server"]["host"], data["server"]["port"] = parse_addr(args.addr)
        if args.message is not None:
            data["server"]["message"] = args.message
        if args.fortunes_dir is not None:
            data["server"]["fortunes_dir"] = args.fortunes_dir
    else:
        if getattr(args, "url", None) is not None:
            data["poller"]["url"] = args.url
        if getattr(args, "window", None) is not None:
            data["window"]["seconds"] = args.window
        if getattr(args, "poll_interval", None) is not None:
            data["poller"]["interval"] = args.poll_interval
        if getattr(args, "render_interval", None) is not None:
            data["renderer"]["interval"] = args.render_interval
        if getattr(args, "color", None) is not None:
            data["renderer"]["color"] = args.color

    return AppConfig(**data)


async def run_dashboard(config: AppConfig, stop_event: Optional[asyncio.Event] = None):
    """主函数：启动轮询与绘制任务"""
    aggregator = TagAggregator()

    logger.info(f"Version Monitor v{__version__}")
    logger.info(f"Polling {config.poller.url}, window={config.window.seconds}s")

    try:
        await asyncio.gather(
            run_poller(aggregator, config, stop_event),
            run_renderer(aggregator, config, stop_event=stop_event)
        )
    except asyncio.CancelledError:
        logger.info("Tasks cancelled, shutting down...")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "dashboard"

    try:
        config = apply_overrides(load_config(getattr(args, "config", None)), args)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1
    set_config(config)
    setup_logging(config)

    if args.command == "serve":
        fortunes = None
        if config.server.fortunes_dir:
            try:
                fortunes = load_fortunes(config.server.fortunes_dir)
            except FortuneError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        run_server(config, fortunes)
        return 0

    asyncio.run(run_dashboard(config))
    return 0


def cli():
    """命令行入口"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nShutdown requested, exiting...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    cli()
