"""
日志系统模块

flatconf 的所有日志都挂在 'flatconf' 命名空间下，默认不安装任何handler，
由使用方调用 setup_logger（或 SettingsManager.apply_logging）按设置安装。
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Any, Optional, Union

LOGGER_NAME = 'flatconf'

_SIZE_UNITS = {
    'KB': 1024,
    'MB': 1024 * 1024,
    'GB': 1024 * 1024 * 1024
}


def setup_logger(config: Dict[str, Any]) -> logging.Logger:
    """按日志设置安装 flatconf 的handler

    Args:
        config: 日志设置，对应设置文件中的 logging 节：
            level, format, console, file_path, max_file_size, backup_count

    Returns:
        配置好的 flatconf logger

    Raises:
        ValueError: 日志级别或文件大小不合法
    """
    level = _parse_level(config.get('level', 'INFO'))
    formatter = logging.Formatter(
        config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # 重复调用时替换旧的handler
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config.get('console', True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    file_path = config.get('file_path')
    if file_path:
        log_file = Path(file_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=_parse_size(config.get('max_file_size', '10MB')),
            backupCount=int(config.get('backup_count', 5)),
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"日志系统已配置: level={logging.getLevelName(level)}, file={file_path}")
    return logger


def _parse_level(level: Union[str, int]) -> int:
    """解析日志级别，支持 'debug' / 'INFO' 或数值"""
    if isinstance(level, int) and not isinstance(level, bool):
        return level

    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"未知的日志级别: {level!r}")
    return value


def _parse_size(size: Union[str, int]) -> int:
    """解析文件大小

    Args:
        size: 字节数，或 '512KB' / '10MB' / '1GB' 形式的字符串

    Returns:
        字节数
    """
    if isinstance(size, int) and not isinstance(size, bool):
        return size

    size_str = str(size).upper().strip()
    unit = size_str[-2:]
    try:
        if unit in _SIZE_UNITS:
            return int(size_str[:-2]) * _SIZE_UNITS[unit]
        return int(size_str)
    except ValueError:
        raise ValueError(f"无法解析的文件大小: {size!r}") from None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取 flatconf 命名空间下的logger，name 为空时返回根 flatconf logger"""
    if name:
        return logging.getLogger(f'{LOGGER_NAME}.{name}')
    return logging.getLogger(LOGGER_NAME)
