# 设置管理模块
# Settings Management Module
#
# 负责 flatconf 库自身运行参数的管理
# 支持 YAML / JSON 设置文件、默认值处理

from .settings_manager import SettingsManager

__all__ = [
    'SettingsManager'
]
