"""
设备消息表
字段观察员设备上报的遥测记录，只追加，创建后不再修改
"""

from typing import Any, Dict, Optional

from sqlmodel import Field, Column, JSON

from .base import TimestampModel

# payload 必填键
TIMESTAMP_KEY = "timestamp"
KEY_KEY = "key"
VALUE_KEY = "value"


class DeviceMessage(TimestampModel, table=True):
    """
    设备消息表
    每条消息创建后立即投影到所属用户的观察员报告
    """
    __tablename__ = "device_messages"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 外键：归属用户
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)

    # 原始键值 payload，至少包含 timestamp / key / value
    message: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
