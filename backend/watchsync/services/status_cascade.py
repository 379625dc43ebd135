"""
审核状态级联

用户审核状态变化后，按目标状态改写该用户所有报告的 status：
- approved: 逐条校验并重新保存，不修改任何字段
- rejected / problem / blocked: 一条 UPDATE 批量写入同名状态
- pending / none: 不做任何事

approved 分支是"先读后逐条写"，与并发的报告投影之间存在窄竞争窗口，
这里不加锁，接受该竞争。
"""

import logging
from enum import Enum
from typing import Any, Dict

from sqlmodel import Session

from watchsync.exceptions import InvalidStatus
from watchsync.models.user import User, WatcherStatus
from watchsync.repositories.report_repository import ReportRepository

logger = logging.getLogger(__name__)


class CascadeAction(str, Enum):
    """级联动作枚举"""
    REVALIDATE = "revalidate"
    OVERWRITE = "overwrite"
    NOTHING = "nothing"


# 审核状态 -> 级联动作，逐项列出
CASCADE_ACTIONS: Dict[WatcherStatus, CascadeAction] = {
    WatcherStatus.APPROVED: CascadeAction.REVALIDATE,
    WatcherStatus.REJECTED: CascadeAction.OVERWRITE,
    WatcherStatus.PROBLEM: CascadeAction.OVERWRITE,
    WatcherStatus.BLOCKED: CascadeAction.OVERWRITE,
    WatcherStatus.PENDING: CascadeAction.NOTHING,
    WatcherStatus.NONE: CascadeAction.NOTHING,
}


def coerce_watcher_status(value: Any) -> WatcherStatus:
    """
    把外部输入转换为 WatcherStatus

    Raises:
        InvalidStatus: 不是六个枚举值之一
    """
    if isinstance(value, WatcherStatus):
        return value
    if isinstance(value, str):
        try:
            return WatcherStatus(value)
        except ValueError:
            pass
    raise InvalidStatus(
        f"非法的审核状态: {value!r}",
        details={"value": repr(value), "allowed": [s.value for s in WatcherStatus]}
    )


class StatusCascade:
    """
    审核状态级联器

    使用示例：
        StatusCascade(session).on_status_changed(user, WatcherStatus.PENDING, WatcherStatus.REJECTED)
    """

    def __init__(self, session: Session):
        self.session = session
        self.reports = ReportRepository(session)

    def on_status_changed(self, user: User, old_status: WatcherStatus, new_status: WatcherStatus) -> int:
        """
        在用户审核状态变化后执行级联

        Args:
            user: 状态已变化的用户
            old_status: 旧状态
            new_status: 新状态

        Returns:
            受影响的报告数量

        Raises:
            ValidationError: approved 分支中某条报告未通过校验，剩余报告不再处理
            PersistenceError: 写入失败
        """
        if old_status == new_status:
            return 0

        action = CASCADE_ACTIONS[new_status]
        if action is CascadeAction.REVALIDATE:
            return self._revalidate_reports(user)
        if action is CascadeAction.OVERWRITE:
            return self._overwrite_status(user, new_status)

        logger.info("审核状态 %s 无级联动作 (user_id=%s)", new_status.value, user.id)
        return 0

    def _revalidate_reports(self, user: User) -> int:
        reports = self.reports.list_by_user(user.id)
        for report in reports:
            self.reports.save(report)
        logger.info("已重新校验 %d 份报告 (user_id=%s)", len(reports), user.id)
        return len(reports)

    def _overwrite_status(self, user: User, status: WatcherStatus) -> int:
        count = self.reports.bulk_update_status(user.id, status)
        logger.info("已将 %d 份报告状态置为 %s (user_id=%s)", count, status.value, user.id)
        return count
