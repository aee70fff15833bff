"""
配置加载模块

从 config.yaml 加载配置，支持 Pydantic 验证和环境变量覆盖。
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


class PollerConfig(BaseModel):
    """轮询配置"""
    url: str = "http://localhost:8181"
    interval: float = Field(default=0.1, gt=0)
    timeout: float = Field(default=1.0, gt=0)


class RendererConfig(BaseModel):
    """终端绘制配置"""
    interval: float = Field(default=1.0, gt=0)
    width: int = Field(default=80, ge=20)
    color: Literal["auto", "on", "off"] = "auto"


class WindowConfig(BaseModel):
    """计数窗口配置"""
    seconds: float = Field(default=30.0, gt=0)


class ServerConfig(BaseModel):
    """状态端点服务配置"""
    host: str = "0.0.0.0"
    port: int = 8181
    hostname: Optional[str] = None
    message: str = "v2"
    fortunes_dir: Optional[str] = None


class LoggingConfig(BaseModel):
    """日志配置"""
    level: str = "INFO"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """应用配置（完整配置）"""
    poller: PollerConfig = Field(default_factory=PollerConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    加载配置文件

    优先级：
    1. 参数指定的路径
    2. 环境变量 VERSION_MONITOR_CONFIG
    3. 默认路径 config.yaml
    """
    if config_path is None:
        config_path = os.environ.get("VERSION_MONITOR_CONFIG", "config.yaml")

    config_file = Path(config_path)

    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
            if raw_config:
                # fortunes_dir 相对路径以配置文件所在目录为基准
                server = raw_config.get("server") or {}
                fortunes_dir = server.get("fortunes_dir")
                if fortunes_dir and not Path(fortunes_dir).is_absolute():
                    server["fortunes_dir"] = str((config_file.resolve().parent / fortunes_dir).resolve())
                    raw_config["server"] = server

                return AppConfig(**raw_config)

    # 配置文件不存在时使用默认配置
    return AppConfig()


# 全局配置实例（延迟加载）
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """获取全局配置实例（单例模式）"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: AppConfig):
    """替换全局配置（命令行参数覆盖后调用）"""
    global _config
    _config = config


def reset_config():
    """重置配置（主要用于测试）"""
    global _config
    _config = None
