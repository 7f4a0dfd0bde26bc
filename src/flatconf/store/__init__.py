"""
存储层模块

提供键值配置存储、路径登记服务和文件系统访问层
"""

from .config_store import ConfigStore, create_config_store, DEFAULT_DELIMITER
from .registry import PathRegistry, get_default_registry
from .filesystem import LocalFileSystem

__all__ = [
    "ConfigStore",
    "create_config_store",
    "DEFAULT_DELIMITER",
    "PathRegistry",
    "get_default_registry",
    "LocalFileSystem"
]
