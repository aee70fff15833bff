"""
测试配置加载与命令行覆盖
"""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# 添加项目路径到 sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from version_monitor import config as config_module
from version_monitor.config import AppConfig, get_config, load_config, reset_config
from version_monitor.main import apply_overrides, build_parser, main, parse_addr


@pytest.fixture(autouse=True)
def _reset():
    reset_config()
    yield
    reset_config()


class TestLoadConfig:

    def test_defaults_when_missing(self, tmp_path):
        """测试：配置文件不存在时使用默认值"""
        config = load_config(str(tmp_path / "missing.yaml"))

        assert config.poller.url == "http://localhost:8181"
        assert config.poller.interval == 0.1
        assert config.renderer.interval == 1.0
        assert config.window.seconds == 30

    def test_yaml_values(self, tmp_path):
        """测试：从 YAML 读取"""
        path = tmp_path / "config.yaml"
        path.write_text(
            "poller:\n  url: http://10.0.0.5:8181\n  interval: 0.5\n"
            "window:\n  seconds: 60\n"
            "server:\n  fortunes_dir: fortunes\n",
            encoding="utf-8"
        )

        config = load_config(str(path))

        assert config.poller.url == "http://10.0.0.5:8181"
        assert config.poller.interval == 0.5
        assert config.window.seconds == 60
        # 相对路径以配置文件目录为基准
        assert config.server.fortunes_dir == str((tmp_path / "fortunes").resolve())

    def test_env_path(self, tmp_path, monkeypatch):
        """测试：环境变量指定配置路径"""
        path = tmp_path / "custom.yaml"
        path.write_text("window:\n  seconds: 5\n", encoding="utf-8")
        monkeypatch.setenv("VERSION_MONITOR_CONFIG", str(path))

        assert get_config().window.seconds == 5

    def test_empty_file(self, tmp_path):
        """测试：空文件使用默认值"""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(str(path)) == AppConfig()

    def test_rejects_non_positive_window(self, tmp_path):
        """测试：窗口必须为正数"""
        path = tmp_path / "config.yaml"
        path.write_text("window:\n  seconds: 0\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_config(str(path))

    def test_singleton(self, tmp_path, monkeypatch):
        """测试：get_config 返回同一实例"""
        monkeypatch.setenv("VERSION_MONITOR_CONFIG", str(tmp_path / "missing.yaml"))

        assert get_config() is get_config()
        assert config_module._config is not None


class TestOverrides:

    def test_dashboard_flags(self):
        """测试：面板参数覆盖配置"""
        args = build_parser().parse_args([
            "dashboard", "--url", "http://x:1", "--window", "10",
            "--poll-interval", "0.2", "--render-interval", "2", "--color", "off"
        ])

        config = apply_overrides(AppConfig(), args)

        assert config.poller.url == "http://x:1"
        assert config.window.seconds == 10
        assert config.poller.interval == 0.2
        assert config.renderer.interval == 2
        assert config.renderer.color == "off"

    def test_serve_flags(self):
        """测试：服务参数覆盖配置"""
        args = build_parser().parse_args(["serve", "--addr", ":9000", "--message", "v9"])

        config = apply_overrides(AppConfig(), args)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000
        assert config.server.message == "v9"

    def test_invalid_override_rejected(self):
        """测试：非法覆盖值触发校验错误"""
        args = build_parser().parse_args(["dashboard", "--window", "-1"])

        with pytest.raises(ValidationError):
            apply_overrides(AppConfig(), args)

    def test_parse_addr(self):
        assert parse_addr("127.0.0.1:8181") == ("127.0.0.1", 8181)
        assert parse_addr(":8181") == ("0.0.0.0", 8181)
        with pytest.raises(ValueError):
            parse_addr("8181")


class TestMain:

    def test_invalid_config_exits_1(self, tmp_path, capsys):
        """测试：配置非法时返回 1 并输出错误"""
        path = tmp_path / "config.yaml"
        path.write_text("poller:\n  interval: -5\n", encoding="utf-8")

        assert main(["dashboard", "--config", str(path)]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_missing_fortunes_dir_exits_1(self, tmp_path, capsys, monkeypatch):
        """测试：fortune 目录不存在时返回 1"""
        monkeypatch.setattr("version_monitor.main.setup_logging", lambda config: None)
        missing = tmp_path / "nope"

        assert main(["serve", "--config", str(tmp_path / "none.yaml"), "--fortunes-dir", str(missing)]) == 1
        assert "fortune directory not found" in capsys.readouterr().err
