"""
测试 fortune 解析与抽样
"""

import random
import sys
from pathlib import Path

import pytest

# 添加项目路径到 sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from version_monitor.fortunes import FortuneError, Fortunes, load_fortunes, parse_fortunes


class TestParseFortunes:

    def test_percent_separated(self):
        """测试：单独一行 % 结束一条"""
        text = "first\n%\nsecond\n%\n"
        assert parse_fortunes(text) == ["first", "second"]

    def test_multiline_joined(self):
        """测试：条目内多行直接拼接"""
        text = "line one\nline two\n%\n"
        assert parse_fortunes(text) == ["line oneline two"]

    def test_trailing_text_dropped(self):
        """测试：最后一个 % 之后的内容不计入"""
        text = "kept\n%\nnot terminated\n"
        assert parse_fortunes(text) == ["kept"]

    def test_percent_inside_line_not_separator(self):
        """测试：行内的 % 不是分隔符"""
        text = "100% sure\n%\n"
        assert parse_fortunes(text) == ["100% sure"]

    def test_empty(self):
        assert parse_fortunes("") == []


class TestFortunes:

    def test_sample_empty(self):
        """测试：空集合抽样返回空字符串"""
        assert Fortunes().sample() == ""

    def test_sample_from_set(self):
        """测试：抽样结果属于集合"""
        fortunes = Fortunes(["a", "b", "c"], rng=random.Random(42))
        samples = {fortunes.sample() for _ in range(50)}

        assert samples <= {"a", "b", "c"}
        assert len(samples) > 1


class TestLoadFortunes:

    def test_walks_directory(self, tmp_path):
        """测试：递归读取目录下所有文件"""
        (tmp_path / "one").write_text("alpha\n%\nbeta\n%\n", encoding="utf-8")
        nested = tmp_path / "nested"
        nested.mkdir()
        (nested / "two").write_text("gamma\n%\n", encoding="utf-8")

        fortunes = load_fortunes(str(tmp_path), rng=random.Random(0))

        assert len(fortunes) == 3
        assert fortunes.sample() in {"alpha", "beta", "gamma"}

    def test_missing_directory(self, tmp_path):
        """测试：目录不存在"""
        with pytest.raises(FortuneError):
            load_fortunes(str(tmp_path / "missing"))

    def test_binary_index_file_tolerated(self, tmp_path):
        """测试：目录中的二进制 .dat 索引不影响加载"""
        (tmp_path / "art").write_text("a\n%\n", encoding="utf-8")
        (tmp_path / "art.dat").write_bytes(b"\x00\x00\x00\x02\xff\xfe")

        fortunes = load_fortunes(str(tmp_path))

        assert len(fortunes) == 1
        assert fortunes.sample() == "a"

    def test_invalid_bytes_replaced(self, tmp_path):
        """测试：条目内非 UTF-8 字节被替换而不是报错"""
        (tmp_path / "latin").write_bytes(b"caf\xe9\n%\n")

        fortunes = load_fortunes(str(tmp_path))

        assert fortunes.sample() == "caf\ufffd"
