"""
用户域模型 - 用户表
核心只关心稳定的用户 ID、角色和观察员审核状态，身份认证由外部系统负责
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Column, String
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field

from .base import TimestampModel


class WatcherStatus(str, Enum):
    """观察员审核状态枚举 - 封闭集合，只通过审核操作修改"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROBLEM = "problem"
    BLOCKED = "blocked"
    NONE = "none"


class UserRole(str, Enum):
    """用户角色枚举"""
    ADMIN = "admin"
    MODERATOR = "moderator"
    PARTNER = "partner"
    WATCHER = "watcher"


class WatcherStatusType(TypeDecorator):
    """
    审核状态列类型，按枚举值存储

    历史数据中的 NULL / 空字符串在读取时归一为 none，
    归一化发生在结果处理阶段，加载本身不会产生 UPDATE
    """
    impl = String(16)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, WatcherStatus):
            return value.value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or not value.strip():
            return WatcherStatus.NONE
        return WatcherStatus(value.strip())


class User(TimestampModel, table=True):
    """
    用户表
    拥有多条位置记录、多条设备消息和至多一份观察员报告
    """
    __tablename__ = "users"

    # 主键
    id: Optional[int] = Field(default=None, primary_key=True)

    # 邮箱，唯一
    email: str = Field(unique=True, index=True, nullable=False)

    # 展示用名称
    name: Optional[str] = Field(default=None)

    # 角色：admin / moderator / partner / watcher
    role: Optional[UserRole] = Field(default=None, index=True)

    # 是否是观察员
    is_watcher: bool = Field(default=False, nullable=False)

    # 审核状态，历史数据中可能为空，加载时归一为 none
    watcher_status: Optional[WatcherStatus] = Field(
        default=WatcherStatus.NONE,
        sa_column=Column(WatcherStatusType(), index=True, nullable=True)
    )
