"""
异常处理模块
"""

import functools
import logging
from typing import Dict, Any, Optional


class ConfigStoreException(Exception):
    """配置存储基础异常"""

    def __init__(self, message: str, error_code: int = 2000, details: Optional[Dict[str, Any]] = None):
        """初始化异常

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 错误详情
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentException(ConfigStoreException, ValueError):
    """参数校验异常（键、值或分隔符不合法）"""

    def __init__(self, message: str, argument_name: Optional[str] = None, argument_value: Any = None):
        """初始化参数校验异常

        Args:
            message: 错误消息
            argument_name: 参数名
            argument_value: 参数值
        """
        super().__init__(message, 2001, {
            'argument_name': argument_name,
            'argument_value': argument_value
        })
        self.argument_name = argument_name
        self.argument_value = argument_value


class AlreadyBoundException(ConfigStoreException):
    """文件路径已被其他存储实例占用"""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, 2002, {'file_path': file_path})
        self.file_path = file_path


class StoreFileNotFoundException(ConfigStoreException):
    """存储文件不存在"""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, 2003, {'file_path': file_path})
        self.file_path = file_path


class FormatException(ConfigStoreException, ValueError):
    """存储文件行格式错误"""

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        """初始化格式异常

        Args:
            message: 错误消息
            line_number: 出错行号（从1开始）
            line: 出错行内容
        """
        super().__init__(message, 2004, {
            'line_number': line_number,
            'line': line
        })
        self.line_number = line_number
        self.line = line


class IOFailureException(ConfigStoreException):
    """文件系统读写异常"""

    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message, 2005, {
            'file_path': file_path,
            'operation': operation
        })
        self.file_path = file_path
        self.operation = operation


class StoreClosedException(ConfigStoreException):
    """存储实例已关闭"""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, 2006, {'file_path': file_path})
        self.file_path = file_path


def exception_handler(exception_types: tuple = (Exception,),
                      default_return: Any = None,
                      log_error: bool = True):
    """异常处理装饰器

    捕获指定异常并返回默认值，不向调用方抛出

    Args:
        exception_types: 要捕获的异常类型
        default_return: 默认返回值
        log_error: 是否记录错误日志
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except exception_types as e:
                if log_error:
                    logger = logging.getLogger('flatconf')
                    logger.error(f"函数 {func.__name__} 执行异常: {e}", exc_info=True)

                    if isinstance(e, ConfigStoreException):
                        # 记录业务异常详情
                        logger.warning(f"业务异常 - 错误码: {e.error_code}, 详情: {e.details}")

                return default_return
        return wrapper
    return decorator
