"""
Version Monitor 主程序入口

使用方式:
    python -m version_monitor dashboard --url http://localhost:8181
    python -m version_monitor serve --addr :8181
"""

from version_monitor.main import cli


if __name__ == "__main__":
    cli()
