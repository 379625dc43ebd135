"""
用户位置记录表
每条记录把用户关联到一个委员会，created_at 最新的一条决定用户当前所属委员会
"""

from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field

from .base import TimestampModel


class UserLocation(TimestampModel, table=True):
    """
    用户位置记录
    对核心只读，由外部身份系统写入
    """
    __tablename__ = "user_locations"

    # 按用户取最新位置的查询热点
    __table_args__ = (Index("ix_user_locations_user_created", "user_id", "created_at"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", nullable=False)

    commission_id: int = Field(foreign_key="commissions.id", index=True, nullable=False)
