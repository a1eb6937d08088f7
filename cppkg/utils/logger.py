"""cppkg 日志配置

日志挂在 "cppkg" 包日志器上，不改动根日志器，作为库嵌入时不影响宿主程序。
支持普通文本和结构化 JSON 两种输出格式，统一输出到 stderr；
stdout 只留给面向用户的进度行。

环境变量（CLI 入口读取）:
    CPPKG_LOG_LEVEL   日志级别，默认 WARNING
    CPPKG_LOG_JSON=1  输出 JSON 行，便于 CI 采集
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Mapping

PACKAGE_LOGGER = "cppkg"
DEFAULT_LEVEL = "WARNING"

# 通过 logger.xxx(..., extra={...}) 附带的领域字段，JSON 输出时原样带出
CONTEXT_FIELDS = ("package", "stage", "commit", "url")


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "cppkg.core.installer",
            "message": "缓存命中: fmt-0123456789ab",
            "function": "_install_one",
            "line": 42,
            "package": "fmt",               (仅在 extra 中提供时)
            "exception": "traceback..."     (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            # 记录事件发生时间而非格式化时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = DEFAULT_LEVEL, json_output: bool = False) -> logging.Logger:
    """配置 cppkg 包日志器并返回

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR），无法识别时回退到 WARNING
        json_output: 为 True 时输出 JSON 行，否则输出人类可读格式

    重复调用会替换之前安装的 handler，不会重复输出。
    """
    reset_logging()
    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("cppkg: %(levelname)s %(name)s: %(message)s"))
    pkg.addHandler(handler)
    return pkg


def setup_logging_from_env(environ: Mapping[str, str] | None = None) -> logging.Logger:
    """按 CPPKG_LOG_LEVEL / CPPKG_LOG_JSON 配置日志"""
    env = os.environ if environ is None else environ
    return setup_logging(
        level=env.get("CPPKG_LOG_LEVEL") or DEFAULT_LEVEL,
        json_output=env.get("CPPKG_LOG_JSON", "") == "1",
    )


def reset_logging() -> None:
    """移除 cppkg 包日志器上的 handler 并恢复默认级别"""
    pkg = logging.getLogger(PACKAGE_LOGGER)
    for handler in pkg.handlers[:]:
        pkg.removeHandler(handler)
        handler.close()
    pkg.setLevel(logging.NOTSET)
