"""
观察员报告表
每个用户至多一份的派生"当前状态"记录，由最新一条设备消息重建
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from watchsync.exceptions import ValidationError

from .base import TimestampModel
from .user import WatcherStatus


class WatcherReport(TimestampModel, table=True):
    """
    观察员报告表

    - device_message_id 始终指向最后一次写入它的设备消息
    - commission_id 在写入时解析，之后不再重新解析
    - status 只由审核状态级联写入，投影时不修改
    """
    __tablename__ = "watcher_reports"

    # 每个用户只有一份报告，并发创建时由唯一约束兜底
    __table_args__ = (UniqueConstraint("user_id", name="uix_report_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", nullable=False)

    device_message_id: int = Field(foreign_key="device_messages.id", index=True, nullable=False)

    commission_id: Optional[int] = Field(default=None, foreign_key="commissions.id", index=True)

    # 设备上报的时间（UTC）
    recorded_at: datetime = Field(nullable=False)

    key: str = Field(nullable=False)

    value: str = Field(nullable=False)

    # 首次创建时为空
    status: Optional[WatcherStatus] = Field(default=None, index=True)


def validate_report(report: WatcherReport) -> None:
    """
    校验报告自身的不变量，保存前调用

    Raises:
        ValidationError: 任一不变量不满足
    """
    errors = []
    if report.user_id is None:
        errors.append("user_id is required")
    if report.device_message_id is None:
        errors.append("device_message_id is required")
    if not isinstance(report.recorded_at, datetime):
        errors.append("recorded_at must be a datetime")
    if not isinstance(report.key, str):
        errors.append("key must be a string")
    if not isinstance(report.value, str):
        errors.append("value must be a string")
    if report.status is not None and not isinstance(report.status, WatcherStatus):
        errors.append("status must be a WatcherStatus")

    if errors:
        raise ValidationError(
            f"观察员报告校验失败 (ID: {report.id})",
            details={"report_id": report.id, "errors": errors}
        )
