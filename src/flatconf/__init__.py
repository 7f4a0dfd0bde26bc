"""
flatconf

基于单一文本文件的键值配置存储，每个文件同一时刻只允许一个存储实例。
"""

__version__ = "1.0.0"

# 导出主要类和函数
from .store import (
    ConfigStore,
    create_config_store,
    PathRegistry,
    get_default_registry,
    LocalFileSystem
)
from .settings import SettingsManager
from .utils.exceptions import (
    ConfigStoreException,
    InvalidArgumentException,
    AlreadyBoundException,
    StoreFileNotFoundException,
    FormatException,
    IOFailureException,
    StoreClosedException
)

__all__ = [
    "ConfigStore",
    "create_config_store",
    "PathRegistry",
    "get_default_registry",
    "LocalFileSystem",
    "SettingsManager",
    "ConfigStoreException",
    "InvalidArgumentException",
    "AlreadyBoundException",
    "StoreFileNotFoundException",
    "FormatException",
    "IOFailureException",
    "StoreClosedException",
    "__version__",
]
