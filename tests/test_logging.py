import logging
import sys

import pytest
from loguru import logger

from banyan.core.logger import setup_logging


@pytest.fixture
def log_dir(settings, tmp_path):
    path = setup_logging(settings, tmp_path / "logs")
    yield path
    # 关闭文件 sink，恢复默认控制台输出
    logger.remove()
    logger.add(sys.stderr)


def test_setup_logging_creates_files(log_dir):
    """验证普通日志与错误日志分别写入各自的文件"""
    logger.info("这是一条测试 INFO 日志")
    logger.error("这是一条测试 ERROR 日志")

    log_file = log_dir / "banyan.log"
    error_file = log_dir / "banyan_error.log"
    assert log_file.exists()
    assert error_file.exists()

    content = log_file.read_text(encoding="utf-8")
    assert "这是一条测试 INFO 日志" in content
    assert "这是一条测试 ERROR 日志" in content

    content = error_file.read_text(encoding="utf-8")
    assert "这是一条测试 ERROR 日志" in content
    assert "这是一条测试 INFO 日志" not in content


def test_standard_logging_is_intercepted(log_dir):
    logging.getLogger("banyan.client.session").warning("标准库日志转发")

    content = (log_dir / "banyan.log").read_text(encoding="utf-8")
    assert "标准库日志转发" in content
    assert "WARNING" in content
