"""
路径登记服务

记录当前被存活的 ConfigStore 占用的绝对文件路径，保证同一路径同一时刻最多只有一个存储实例
"""

import threading
from typing import Dict, List, Optional

from ..utils.logger import get_logger
from ..utils.exceptions import AlreadyBoundException


class PathRegistry:
    """已占用路径登记表

    登记表自带一把锁，与各个存储实例自身的锁相互独立。
    路径统一使用绝对路径字符串作为键。
    """

    def __init__(self):
        self.logger = get_logger('registry')
        # dict 作为有序集合使用，保持占用顺序
        self._claimed: Dict[str, None] = {}
        self._lock = threading.Lock()

    def try_claim(self, path: str) -> bool:
        """尝试占用路径

        Args:
            path: 绝对路径

        Returns:
            bool: 路径此前未被占用且已登记成功时返回True
        """
        with self._lock:
            if path in self._claimed:
                return False
            self._claimed[path] = None

        self.logger.debug(f"路径已登记: {path}")
        return True

    def claim(self, path: str) -> None:
        """占用路径，已被占用时抛出 AlreadyBoundException"""
        if not self.try_claim(path):
            raise AlreadyBoundException(f"路径已被其他ConfigStore占用: {path}", path)

    def release(self, path: Optional[str]) -> bool:
        """释放路径

        Returns:
            bool: 路径原本处于占用状态时返回True
        """
        if path is None:
            return False

        with self._lock:
            released = self._claimed.pop(path, False) is None

        if released:
            self.logger.debug(f"路径已释放: {path}")
        return released

    def swap(self, old_path: Optional[str], new_path: str) -> None:
        """在同一把锁内占用新路径并释放旧路径

        新路径已被占用时抛出 AlreadyBoundException，旧路径保持占用。
        新旧路径相同时不做任何操作。
        """
        if old_path == new_path:
            return

        with self._lock:
            if new_path in self._claimed:
                raise AlreadyBoundException(f"路径已被其他ConfigStore占用: {new_path}", new_path)
            self._claimed[new_path] = None
            if old_path is not None:
                self._claimed.pop(old_path, None)

        self.logger.debug(f"路径已切换: {old_path} -> {new_path}")

    def is_claimed(self, path: str) -> bool:
        with self._lock:
            return path in self._claimed

    def claimed_paths(self) -> List[str]:
        """返回当前所有被占用的绝对路径（按占用顺序）"""
        with self._lock:
            return list(self._claimed)

    def clear(self) -> None:
        """清空登记表，仅用于测试或进程内重置"""
        with self._lock:
            self._claimed.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)

    def __contains__(self, path: str) -> bool:
        return self.is_claimed(path)


_default_registry: Optional[PathRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> PathRegistry:
    """获取进程级共享的默认登记表"""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = PathRegistry()
        return _default_registry
