"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 用户域模型
from .user import User, UserRole, WatcherStatus
from .commission import Commission
from .location import UserLocation

# 同步域模型
from .device_message import DeviceMessage
from .report import WatcherReport, validate_report

# 基础模型
from .base import TimestampModel

__all__ = [
    # 用户域
    "User", "UserRole", "WatcherStatus",
    "Commission",
    "UserLocation",
    # 同步域
    "DeviceMessage",
    "WatcherReport", "validate_report",
    # 基础模型
    "TimestampModel"
]
