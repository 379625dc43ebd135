"""
Repository (DAO) 模块
提供数据库操作的抽象层，封装 CRUD 逻辑
"""

from .user_repository import UserRepository
from .location_repository import CommissionRepository, LocationRepository
from .device_message_repository import DeviceMessageRepository
from .report_repository import ReportRepository

__all__ = [
    "UserRepository",
    "CommissionRepository",
    "LocationRepository",
    "DeviceMessageRepository",
    "ReportRepository"
]
