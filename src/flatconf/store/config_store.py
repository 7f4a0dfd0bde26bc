#!/usr/bin/python3
# -*- coding: UTF-8 -*-

"""
键值配置存储

功能说明：
1. 在内存中维护字符串键值对，并绑定到唯一的存储文件
2. 键和值只允许单词字符 [a-zA-Z_0-9]
3. 以 "键<分隔符>值" 的逐行格式保存和加载
4. 通过路径登记服务保证同一文件同一时刻只有一个存储实例
5. 支持 with 语句，退出时可自动保存

存储文件格式（默认分隔符 ": "）：

    key1: value1
    key2: value2
"""

import re
import threading
from pathlib import Path
from typing import Dict, Any, Optional, List, Mapping, Union

from .filesystem import LocalFileSystem
from .registry import PathRegistry, get_default_registry
from ..settings import SettingsManager
from ..utils.logger import get_logger
from ..utils.exceptions import (
    ConfigStoreException,
    InvalidArgumentException,
    IOFailureException,
    FormatException,
    StoreClosedException,
    exception_handler
)

DEFAULT_DELIMITER = ': '

# 仅匹配 ASCII 单词字符
_WORD_PATTERN = re.compile(r'\w+', re.ASCII)


def _validate_word(argument_name: str, text: Any) -> None:
    """校验键或值只包含单词字符

    Raises:
        InvalidArgumentException: 校验失败
    """
    if not isinstance(text, str) or not _WORD_PATTERN.fullmatch(text):
        raise InvalidArgumentException(
            f"{argument_name} {text!r} 含有非单词字符，仅允许 [a-zA-Z_0-9]",
            argument_name,
            text
        )


def _validate_delimiter(delimiter: Any) -> None:
    if not isinstance(delimiter, str) or delimiter == '':
        raise InvalidArgumentException("分隔符不能为空", 'delimiter', delimiter)


def _line_pattern(delimiter: str) -> 're.Pattern':
    """构造行匹配模式，分隔符按字面量处理

    键取最短匹配：分隔符由单词字符组成时（如 "_"），"a_b_c" 解析为键 "a"、值 "b_c"
    """
    return re.compile(r'(\w+?)' + re.escape(delimiter) + r'(\w+)', re.ASCII)


@exception_handler((ConfigStoreException, OSError), default_return=False)
def _best_effort_save(store: 'ConfigStore') -> bool:
    """关闭时的自动保存，失败只记录日志不抛出"""
    return store.save()


class ConfigStore:
    """键值配置存储

    每个实例绑定一个绝对文件路径。修改类操作各自在实例锁内完成，
    但多个调用组成的序列（如先 load 再 save）整体不是原子的。
    """

    def __init__(self,
                 file_path: Union[str, Path],
                 entries: Optional[Mapping[str, str]] = None,
                 delimiter: str = DEFAULT_DELIMITER,
                 auto_save_on_close: bool = False,
                 validate_on_replace: bool = True,
                 registry: Optional[PathRegistry] = None,
                 filesystem: Optional[LocalFileSystem] = None):
        """初始化配置存储

        Args:
            file_path: 存储文件的相对或绝对路径
            entries: 初始键值对，会按 put 的规则校验
            delimiter: 键与值之间的分隔符
            auto_save_on_close: 关闭时是否尽力保存
            validate_on_replace: replace_all 默认是否校验传入的键值对
            registry: 路径登记服务，默认使用进程级共享实例
            filesystem: 文件系统访问层

        Raises:
            InvalidArgumentException: 分隔符或初始键值对不合法
            AlreadyBoundException: 路径已被其他存储实例占用
        """
        self.logger = get_logger('store')
        self._lock = threading.RLock()
        self._registry = registry if registry is not None else get_default_registry()
        self._fs = filesystem if filesystem is not None else LocalFileSystem()

        _validate_delimiter(delimiter)
        self._delimiter = delimiter
        self._line_pattern = _line_pattern(delimiter)
        self._auto_save_on_close = auto_save_on_close
        self._validate_on_replace = validate_on_replace
        self._closed = False

        # 先校验初始数据，再登记路径，避免失败时残留登记
        self._entries: Dict[str, str] = self._checked_copy(entries or {})

        absolute_path = self._fs.absolute_path(file_path)
        self._registry.claim(str(absolute_path))
        self._file_path = absolute_path

        self.logger.info(f"ConfigStore已绑定: {self._file_path}")

    @classmethod
    def open(cls, file_path: Union[str, Path], entries: Optional[Mapping[str, str]] = None, **kwargs) -> 'ConfigStore':
        """打开存储，配合 with 语句使用以保证退出时关闭"""
        return cls(file_path, entries, **kwargs)

    # ------------------------------------------------------------------
    # 属性
    # ------------------------------------------------------------------

    @property
    def file_path(self) -> Path:
        """当前绑定的绝对路径"""
        return self._file_path

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def auto_save_on_close(self) -> bool:
        return self._auto_save_on_close

    @auto_save_on_close.setter
    def auto_save_on_close(self, value: bool) -> None:
        self._auto_save_on_close = bool(value)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def registry(self) -> PathRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # 读写键值
    # ------------------------------------------------------------------

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """获取键对应的值，不存在时返回 default"""
        self._ensure_open()
        return self._entries.get(key, default)

    def put(self, key: str, value: str) -> None:
        """设置键值对，已存在的键会被覆盖

        Raises:
            InvalidArgumentException: 键或值含有非单词字符
        """
        _validate_word('key', key)
        _validate_word('value', value)

        with self._lock:
            self._ensure_open()
            self._entries[key] = value

    def snapshot(self) -> Dict[str, str]:
        """返回当前键值对的独立副本"""
        with self._lock:
            self._ensure_open()
            return dict(self._entries)

    def replace_all(self, new_entries: Mapping[str, str], validate: Optional[bool] = None) -> None:
        """用给定键值对整体替换当前数据

        注意：不会修改存储文件。替换后若先 load 再 save，文件中原有的数据仍会被加载回来。

        Args:
            new_entries: 新的键值对
            validate: 是否逐项校验，None 时使用实例的 validate_on_replace 设置

        Raises:
            InvalidArgumentException: 校验开启且存在不合法的键值对，此时数据保持不变
        """
        if validate is None:
            validate = self._validate_on_replace

        replacement = self._checked_copy(new_entries) if validate else dict(new_entries)

        with self._lock:
            self._ensure_open()
            self._entries = replacement

    # ------------------------------------------------------------------
    # 持久化
    # ------------------------------------------------------------------

    def save(self, clear: bool = True) -> bool:
        """保存全部键值对到绑定文件

        已存在的文件会先删除再重建。写入成功后默认清空内存中的键值对，
        需要继续使用时请重新 load 或 put，或传入 clear=False。

        Args:
            clear: 写入成功后是否清空内存数据

        Returns:
            bool: 保存成功返回True

        Raises:
            IOFailureException: 文件删除、创建或写入失败，此时内存数据保持不变；
                details['previous_file_deleted'] 标明旧文件是否已被删除
        """
        with self._lock:
            self._ensure_open()
            path = self._file_path
            lines = [f"{key}{self._delimiter}{value}" for key, value in self._entries.items()]

            deleted = False
            if self._fs.exists(path):
                self._fs.delete(path)
                deleted = True

            try:
                self._fs.create(path)
                self._fs.append_lines(path, lines)
            except IOFailureException as e:
                # 旧文件已删除时，磁盘上的内容已经丢失
                e.details['previous_file_deleted'] = deleted
                self.logger.error(f"保存失败，旧文件已删除: {deleted}, {path}")
                raise

            if clear:
                self._entries.clear()

            self.logger.debug(f"已保存 {len(lines)} 条配置到 {path}")
            return True

    def save_and_clear(self) -> bool:
        """保存并清空内存数据"""
        return self.save(clear=True)

    def load(self) -> bool:
        """从绑定文件加载键值对

        每一行都必须完整匹配 "键<分隔符>值"，匹配的行立即按 put 的规则写入，
        已存在的键被覆盖，其他键保留。

        Returns:
            bool: 加载成功返回True

        Raises:
            StoreFileNotFoundException: 绑定文件不存在
            FormatException: 某行格式不匹配，之前的行已经生效，该行及之后的行不生效
            IOFailureException: 文件读取失败
        """
        with self._lock:
            self._ensure_open()
            path = self._file_path
            count = 0

            for line_number, line in enumerate(self._fs.read_lines(path), start=1):
                match = self._line_pattern.fullmatch(line)
                if match is None:
                    raise FormatException(
                        f"第 {line_number} 行不匹配格式 <key>{self._delimiter}<value>: {line!r}",
                        line_number,
                        line
                    )
                self.put(match.group(1), match.group(2))
                count += 1

            self.logger.debug(f"已从 {path} 加载 {count} 条配置")
            return True

    # ------------------------------------------------------------------
    # 绑定与分隔符
    # ------------------------------------------------------------------

    def rebind(self, new_path: Union[str, Path]) -> None:
        """切换绑定文件

        新路径登记成功后才释放旧路径；绑定到当前路径不做任何操作。

        Raises:
            AlreadyBoundException: 新路径已被其他存储实例占用，此时状态不变
        """
        with self._lock:
            self._ensure_open()
            absolute_path = self._fs.absolute_path(new_path)
            old_path = self._file_path

            self._registry.swap(str(old_path), str(absolute_path))
            self._file_path = absolute_path

        if old_path != absolute_path:
            self.logger.info(f"ConfigStore绑定已切换: {old_path} -> {absolute_path}")

    def set_delimiter(self, delimiter: str) -> None:
        """设置分隔符，之后的 save / load 使用新的分隔符

        Raises:
            InvalidArgumentException: 分隔符为空
        """
        _validate_delimiter(delimiter)

        with self._lock:
            self._ensure_open()
            self._delimiter = delimiter
            self._line_pattern = _line_pattern(delimiter)

    def list_claimed_paths(self) -> List[str]:
        """返回登记表中所有被占用的绝对路径"""
        return self._registry.claimed_paths()

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def close(self) -> None:
        """关闭存储并释放绑定路径

        开启 auto_save_on_close 时先尽力保存，保存失败只记录日志。重复调用无副作用。
        """
        with self._lock:
            if self._closed:
                return

            if self._auto_save_on_close:
                if not _best_effort_save(self):
                    self.logger.warning(f"关闭时自动保存失败: {self._file_path}")

            self._registry.release(str(self._file_path))
            self._closed = True

        self.logger.info(f"ConfigStore已关闭: {self._file_path}")

    def dispose(self) -> None:
        """close 的别名"""
        self.close()

    def __enter__(self) -> 'ConfigStore':
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------
    # 内部方法
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedException(f"ConfigStore已关闭: {self._file_path}", str(self._file_path))

    def _checked_copy(self, entries: Mapping[str, str]) -> Dict[str, str]:
        """校验全部键值对并返回副本"""
        for key, value in entries.items():
            _validate_word('key', key)
            _validate_word('value', value)
        return dict(entries)

    def __len__(self) -> int:
        self._ensure_open()
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        self._ensure_open()
        return key in self._entries

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f"ConfigStore({str(self._file_path)!r}, entries={len(self._entries)}, {state})"


def create_config_store(file_path: Union[str, Path],
                        entries: Optional[Mapping[str, str]] = None,
                        settings: Optional[SettingsManager] = None,
                        registry: Optional[PathRegistry] = None) -> ConfigStore:
    """按库设置创建配置存储

    Args:
        file_path: 存储文件路径
        entries: 初始键值对
        settings: 库设置，None 时使用默认设置
        registry: 路径登记服务，None 时使用进程级共享实例

    Returns:
        ConfigStore: 存储实例
    """
    settings = settings or SettingsManager()
    store_settings = settings.get_store_settings()

    return ConfigStore(
        file_path,
        entries,
        delimiter=store_settings.get('delimiter', DEFAULT_DELIMITER),
        auto_save_on_close=_bool_setting(store_settings, 'auto_save_on_close', False),
        validate_on_replace=_bool_setting(store_settings, 'validate_on_replace', True),
        registry=registry,
        filesystem=LocalFileSystem(encoding=store_settings.get('encoding', 'utf-8'))
    )


def _bool_setting(store_settings: Dict[str, Any], name: str, default: bool) -> bool:
    """读取布尔设置，拒绝 "false" 之类的字符串"""
    value = store_settings.get(name, default)
    if not isinstance(value, bool):
        raise InvalidArgumentException(f"设置 store.{name} 必须是布尔值: {value!r}", name, value)
    return value
