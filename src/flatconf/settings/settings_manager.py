#!/usr/bin/python3
# -*- coding: UTF-8 -*-

"""
库设置管理器

功能说明：
1. 管理存储库自身的可配置参数（默认分隔符、编码、关闭时自动保存等）
2. 支持 YAML / JSON 设置文件
3. 设置合并和默认值处理

注意：这里管理的是 flatconf 库的运行设置，而不是 ConfigStore 持久化的键值数据。
"""

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from ..utils.logger import setup_logger


class SettingsManager:
    """库设置管理器

    提供统一的设置读取接口，用户设置覆盖默认设置
    """

    def __init__(self, settings_file: Optional[str] = None):
        """
        初始化设置管理器

        Args:
            settings_file: 设置文件路径，为None时使用默认设置
        """
        self.logger = logging.getLogger(f"flatconf.settings.{self.__class__.__name__}")
        self.settings_file = settings_file
        self.default_settings = self._get_default_settings()
        self.settings_data = copy.deepcopy(self.default_settings)

        if settings_file:
            self.load_settings(settings_file)

        self.logger.debug("SettingsManager初始化完成")

    def _get_default_settings(self) -> Dict[str, Any]:
        """获取默认设置"""
        return {
            # 存储配置
            'store': {
                'delimiter': ': ',
                'encoding': 'utf-8',
                'auto_save_on_close': False,
                'validate_on_replace': True
            },

            # 日志配置
            'logging': {
                'level': 'INFO',
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'console': True,
                'file_path': None,
                'max_file_size': '10MB',
                'backup_count': 5
            }
        }

    def load_settings(self, settings_file: str) -> bool:
        """
        加载设置文件

        Args:
            settings_file: 设置文件路径

        Returns:
            bool: 加载是否成功，失败时回退到默认设置
        """
        try:
            settings_path = Path(settings_file)
            if not settings_path.exists():
                self.logger.warning(f"设置文件不存在: {settings_file}，使用默认设置")
                self.settings_data = copy.deepcopy(self.default_settings)
                return False

            with open(settings_path, 'r', encoding='utf-8') as f:
                if settings_path.suffix.lower() == '.json':
                    loaded_settings = json.load(f)
                elif settings_path.suffix.lower() in ['.yml', '.yaml']:
                    loaded_settings = yaml.safe_load(f) or {}
                else:
                    raise ValueError(f"不支持的设置文件格式: {settings_path.suffix}")

            if not isinstance(loaded_settings, dict):
                raise ValueError(f"设置文件顶层必须是映射: {settings_file}")

            # 默认值中是映射的节，在设置文件中也必须是映射
            for section, default_value in self.default_settings.items():
                if (isinstance(default_value, dict) and section in loaded_settings
                        and not isinstance(loaded_settings[section], dict)):
                    raise ValueError(f"设置节 {section} 必须是映射: {settings_file}")

            # 合并设置（用户设置覆盖默认设置）
            self.settings_data = self._merge_settings(self.default_settings, loaded_settings)
            self.settings_file = settings_file

            self.logger.info(f"设置文件加载成功: {settings_file}")
            return True

        except (OSError, ValueError, yaml.YAMLError) as e:
            self.logger.error(f"加载设置文件失败: {e}", exc_info=True)
            self.settings_data = copy.deepcopy(self.default_settings)
            return False

    def _merge_settings(self, default: Dict, user: Dict) -> Dict:
        """
        合并设置字典

        Args:
            default: 默认设置
            user: 用户设置

        Returns:
            Dict: 合并后的设置
        """
        result = copy.deepcopy(default)

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_settings(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default_value: Any = None) -> Any:
        """
        获取设置值

        Args:
            key: 设置键，支持点分隔的嵌套键，如 'store.delimiter'
            default_value: 默认值

        Returns:
            Any: 设置值
        """
        keys = key.split('.')
        value = self.settings_data

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default_value

        return value

    def set(self, key: str, value: Any) -> bool:
        """
        设置值（仅内存，需调用 save_settings 持久化）

        Args:
            key: 设置键，支持点分隔的嵌套键
            value: 设置值

        Returns:
            bool: 设置是否成功
        """
        keys = key.split('.')
        target = self.settings_data

        # 导航到目标位置
        for k in keys[:-1]:
            if k not in target:
                target[k] = {}
            elif not isinstance(target[k], dict):
                self.logger.error(f"设置值失败，{k} 不是映射: {key}")
                return False
            target = target[k]

        target[keys[-1]] = value

        self.logger.info(f"设置值已更新: {key} = {value}")
        return True

    def get_store_settings(self) -> Dict[str, Any]:
        """获取存储设置"""
        return self._get_section('store')

    def get_logging_settings(self) -> Dict[str, Any]:
        """获取日志设置"""
        return self._get_section('logging')

    def _get_section(self, section: str) -> Dict[str, Any]:
        """获取设置节，节被 set 覆盖成非映射时回退到默认值"""
        value = self.get(section)
        if isinstance(value, dict):
            return value
        self.logger.warning(f"设置节 {section} 不是映射，使用默认值")
        return copy.deepcopy(self.default_settings[section])

    def apply_logging(self) -> logging.Logger:
        """按 logging 节安装 flatconf 的日志handler

        Returns:
            logging.Logger: 配置好的 flatconf logger
        """
        return setup_logger(self.get_logging_settings())

    def save_settings(self, settings_file: Optional[str] = None) -> bool:
        """
        保存设置到文件

        Args:
            settings_file: 设置文件路径，如果为None则使用当前设置文件

        Returns:
            bool: 保存是否成功
        """
        try:
            file_path = settings_file or self.settings_file
            if not file_path:
                self.logger.error("没有指定设置文件路径")
                return False

            settings_path = Path(file_path)
            suffix = settings_path.suffix.lower()
            # 先确认格式再打开文件，避免截断不支持格式的已有文件
            if suffix not in ('.json', '.yml', '.yaml'):
                raise ValueError(f"不支持的设置文件格式: {settings_path.suffix}")

            settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(settings_path, 'w', encoding='utf-8') as f:
                if suffix == '.json':
                    json.dump(self.settings_data, f, indent=2, ensure_ascii=False)
                else:
                    yaml.safe_dump(self.settings_data, f, default_flow_style=False, allow_unicode=True)

            self.settings_file = str(file_path)
            self.logger.info(f"设置已保存到: {file_path}")
            return True

        except (OSError, ValueError, yaml.YAMLError) as e:
            self.logger.error(f"保存设置文件失败: {e}", exc_info=True)
            return False

    def reload_settings(self) -> bool:
        """重新加载设置文件"""
        if self.settings_file:
            return self.load_settings(self.settings_file)
        return False

    def get_all_settings(self) -> Dict[str, Any]:
        """获取所有设置"""
        return copy.deepcopy(self.settings_data)
