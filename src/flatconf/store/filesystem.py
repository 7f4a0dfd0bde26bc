"""
文件系统访问层

ConfigStore 的全部文件读写都经过这里，OSError 统一转换为存储异常
"""

import codecs
import os
from pathlib import Path
from typing import Iterable, Iterator, Union

from ..utils.exceptions import (
    InvalidArgumentException,
    IOFailureException,
    StoreFileNotFoundException
)

PathLike = Union[str, Path]


class LocalFileSystem:
    """本地文件系统实现

    测试中可以替换为任何提供同名方法的对象
    """

    def __init__(self, encoding: str = 'utf-8'):
        """初始化文件系统访问层

        Args:
            encoding: 读写文本文件使用的编码
        """
        try:
            codecs.lookup(encoding)
        except (LookupError, TypeError) as e:
            raise InvalidArgumentException(f"未知的文件编码: {encoding!r}", 'encoding', encoding) from e
        self.encoding = encoding

    def absolute_path(self, path: PathLike) -> Path:
        """解析为规范化的绝对路径（不解析符号链接）"""
        return Path(os.path.abspath(os.path.expanduser(str(path))))

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def delete(self, path: PathLike) -> None:
        try:
            Path(path).unlink()
        except OSError as e:
            raise IOFailureException(f"删除文件失败: {path}, {e}", str(path), 'delete') from e

    def create(self, path: PathLike) -> None:
        """创建空文件，文件已存在时抛出 IOFailureException"""
        try:
            Path(path).touch(exist_ok=False)
        except OSError as e:
            raise IOFailureException(f"创建文件失败: {path}, {e}", str(path), 'create') from e

    def write_lines(self, path: PathLike, lines: Iterable[str]) -> None:
        """截断写入，每行追加换行符"""
        self._write(path, lines, 'w')

    def append_lines(self, path: PathLike, lines: Iterable[str]) -> None:
        """追加写入，每行追加换行符"""
        self._write(path, lines, 'a')

    def _write(self, path: PathLike, lines: Iterable[str], mode: str) -> None:
        try:
            with open(path, mode, encoding=self.encoding) as f:
                for line in lines:
                    f.write(line)
                    f.write('\n')
        except (OSError, LookupError, UnicodeEncodeError) as e:
            raise IOFailureException(f"写入文件失败: {path}, {e}", str(path), 'write') from e

    def read_lines(self, path: PathLike) -> Iterator[str]:
        """逐行读取，返回的行不含行尾换行符

        文件不存在时抛出 StoreFileNotFoundException
        """
        try:
            with open(path, 'r', encoding=self.encoding) as f:
                for line in f:
                    yield line.rstrip('\r\n')
        except FileNotFoundError as e:
            raise StoreFileNotFoundException(f"存储文件不存在: {path}", str(path)) from e
        except (OSError, LookupError, UnicodeDecodeError) as e:
            raise IOFailureException(f"读取文件失败: {path}, {e}", str(path), 'read') from e
