"""
设备消息 -> 观察员报告投影

每条新设备消息都会重建所属用户唯一的观察员报告：
时间戳、键值照搬消息内容，委员会在写入时解析。status 字段不受影响。
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlmodel import Session

from watchsync.exceptions import MalformedPayload
from watchsync.models.device_message import DeviceMessage, TIMESTAMP_KEY, KEY_KEY, VALUE_KEY
from watchsync.models.report import WatcherReport
from watchsync.repositories.report_repository import ReportRepository
from watchsync.services.commission_resolver import CommissionResolver

logger = logging.getLogger(__name__)


def parse_timestamp(payload: Mapping[str, Any]) -> int:
    """
    把 payload 中的 timestamp 解析为整数秒

    接受整数、数字字符串和有限浮点数（向零截断）；
    缺失、空串、布尔值、非数字或非有限值一律拒绝，不做"非法即 0"的宽松转换。

    Raises:
        MalformedPayload: timestamp 缺失或非法
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayload(
            "payload 必须是键值映射",
            details={"type": type(payload).__name__}
        )

    raw = payload.get(TIMESTAMP_KEY)
    if raw is None:
        raise MalformedPayload("payload 缺少 timestamp", details={"field": TIMESTAMP_KEY})

    # bool 是 int 的子类，需要先排除
    if isinstance(raw, bool):
        number = None
    elif isinstance(raw, int):
        return raw
    elif isinstance(raw, float):
        number = raw
    elif isinstance(raw, str):
        text = raw.strip()
        # int()/float() 还接受下划线分隔和非 ASCII 数字，这里只认 ASCII 十进制写法
        if "_" in text or not text.isascii():
            number = None
        else:
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                number = None
    else:
        number = None

    if number is None or not math.isfinite(number):
        raise MalformedPayload(
            "timestamp 不是合法的数字",
            details={"field": TIMESTAMP_KEY, "value": repr(raw)}
        )
    return int(number)


def epoch_to_datetime(seconds: int) -> datetime:
    """
    整数秒 -> UTC datetime

    Raises:
        MalformedPayload: 超出平台可表示范围
    """
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedPayload(
            "timestamp 超出可表示范围",
            details={"field": TIMESTAMP_KEY, "value": seconds}
        ) from e


def validate_payload(payload: Mapping[str, Any]) -> int:
    """
    在写入任何记录之前校验设备消息 payload

    Returns:
        解析后的整数秒

    Raises:
        MalformedPayload: 任一必填字段缺失或非法
    """
    seconds = parse_timestamp(payload)
    epoch_to_datetime(seconds)

    for field in (KEY_KEY, VALUE_KEY):
        if field not in payload:
            raise MalformedPayload(f"payload 缺少 {field}", details={"field": field})
        # 空字符串合法
        if not isinstance(payload[field], str):
            raise MalformedPayload(
                f"{field} 必须是字符串",
                details={"field": field, "type": type(payload[field]).__name__}
            )
    return seconds


class ReportProjector:
    """
    报告投影器

    使用示例：
        projector = ReportProjector(session, CommissionResolver(session))
        report = projector.project(message)
    """

    def __init__(self, session: Session, resolver: CommissionResolver):
        """
        Args:
            session: SQLModel 数据库会话（与写入消息的会话相同）
            resolver: 当前请求使用的委员会解析器
        """
        self.session = session
        self.resolver = resolver
        self.reports = ReportRepository(session)

    def project(self, message: DeviceMessage) -> WatcherReport:
        """
        把刚写入的设备消息投影到所属用户的报告

        流程：
        1. 解析 timestamp
        2. 读取用户的报告，不存在则新建
        3. 写入来源消息、用户、上报时间
        4. 解析并写入当前委员会
        5. 照搬 key / value
        6. 在调用方事务内 flush

        Args:
            message: 已 flush（有 ID）的设备消息

        Returns:
            创建或更新后的 WatcherReport

        Raises:
            MalformedPayload: payload 非法
            PersistenceError: 报告写入失败
        """
        payload = message.message
        recorded_at = epoch_to_datetime(parse_timestamp(payload))
        commission = self.resolver.resolve(message.user_id)

        report = self.reports.get_by_user(message.user_id)
        created = report is None
        if created:
            report = WatcherReport(
                user_id=message.user_id,
                device_message_id=message.id,
                recorded_at=recorded_at,
                key=payload.get(KEY_KEY),
                value=payload.get(VALUE_KEY)
            )

        report.device_message_id = message.id
        report.user_id = message.user_id
        report.recorded_at = recorded_at
        report.commission_id = commission.id if commission is not None else None
        report.key = payload.get(KEY_KEY)
        report.value = payload.get(VALUE_KEY)

        self.reports.save(report)
        logger.info(
            "观察员报告已%s (user_id=%s, report_id=%s, message_id=%s)",
            "创建" if created else "更新", message.user_id, report.id, message.id
        )
        return report
