"""日志配置"""

import logging
import sys
from pathlib import Path

from infrastructure.config.settings import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    配置根日志记录器

    - 控制台输出到 stderr
    - 配置了 log_file 时同时写入文件（自动创建目录）
    - debug 模式下强制使用 DEBUG 级别

    Args:
        settings: 应用配置

    Returns:
        根日志记录器
    """
    level_name = "DEBUG" if settings.debug else settings.log_level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
