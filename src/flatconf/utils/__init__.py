"""
工具模块
"""

from .logger import setup_logger, get_logger
from .exceptions import (
    ConfigStoreException,
    InvalidArgumentException,
    AlreadyBoundException,
    StoreFileNotFoundException,
    FormatException,
    IOFailureException,
    StoreClosedException,
    exception_handler
)

__all__ = [
    "setup_logger",
    "get_logger",
    "ConfigStoreException",
    "InvalidArgumentException",
    "AlreadyBoundException",
    "StoreFileNotFoundException",
    "FormatException",
    "IOFailureException",
    "StoreClosedException",
    "exception_handler"
]
