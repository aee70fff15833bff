"""
Fortune 文件加载与抽样

fortune 文件格式：单独一行 "%" 作为条目结束符，条目内多行直接拼接。
最后一个 "%" 之后的内容不计入。
"""

import logging
import os
import random
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class FortuneError(Exception):
    """fortune 目录或文件无法读取"""


def parse_fortunes(text: str) -> List[str]:
    """解析单个 fortune 文件内容"""
    fortunes: List[str] = []
    buf: List[str] = []

    for line in text.splitlines():
        if line == "%":
            fortunes.append("".join(buf))
            buf = []
            continue
        buf.append(line)

    return fortunes


class Fortunes:
    """fortune 集合"""

    def __init__(self, fortunes: Iterable[str] = (), rng: Optional[random.Random] = None):
        self._fortunes = list(fortunes)
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._fortunes)

    def sample(self) -> str:
        """随机抽取一条，集合为空时返回空字符串"""
        if not self._fortunes:
            return ""
        return self._rng.choice(self._fortunes)


def load_fortunes(root_dir: str, rng: Optional[random.Random] = None) -> Fortunes:
    """
    递归加载目录下所有 fortune 文件

    Args:
        root_dir: fortune 目录
        rng: 随机数生成器（测试时注入）

    Raises:
        FortuneError: 目录不存在或文件读取失败
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise FortuneError(f"fortune directory not found: {root_dir}")

    fortunes: List[str] = []
    file_count = 0

    for dirpath, _dirnames, filenames in os.walk(root):
        for name in sorted(filenames):
            path = Path(dirpath) / name
            try:
                # 按字节读取，非 UTF-8 内容（如 .dat 索引）替换后照常解析
                text = path.read_bytes().decode("utf-8", errors="replace")
            except OSError as e:
                raise FortuneError(f"read {path}: {e}") from e
            fortunes.extend(parse_fortunes(text))
            file_count += 1

    logger.info(f"Loaded {len(fortunes)} fortunes from {file_count} files in {root_dir}")
    return Fortunes(fortunes, rng=rng)
