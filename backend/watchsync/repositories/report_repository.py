"""
观察员报告 Repository

对应存储协作方的三个契约：
- get_by_user: 读取用户的报告
- save: 校验后单条保存
- bulk_update_status: 按用户批量改写 status，单条 UPDATE 原子完成
"""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, col

from watchsync.exceptions import PersistenceError
from watchsync.models.report import WatcherReport, validate_report
from watchsync.models.user import WatcherStatus

logger = logging.getLogger(__name__)


class ReportRepository:
    """
    观察员报告数据访问对象
    写操作只 flush，提交由服务层负责
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_id(self, report_id: int) -> Optional[WatcherReport]:
        return self.session.get(WatcherReport, report_id)

    def get_by_user(self, user_id: int) -> Optional[WatcherReport]:
        """
        获取用户的观察员报告

        Args:
            user_id: 用户 ID

        Returns:
            WatcherReport 对象，不存在则返回 None
        """
        statement = select(WatcherReport).where(WatcherReport.user_id == user_id)
        return self.session.exec(statement).first()

    def list_by_user(self, user_id: int) -> List[WatcherReport]:
        """
        获取用户的全部报告

        当前模型下至多一条，级联逻辑仍按集合处理
        """
        statement = (
            select(WatcherReport)
            .where(WatcherReport.user_id == user_id)
            .order_by(col(WatcherReport.id))
        )
        return list(self.session.exec(statement).all())

    def list_by_status(self, status: Optional[WatcherStatus]) -> List[WatcherReport]:
        if status is None:
            condition = col(WatcherReport.status).is_(None)
        else:
            condition = col(WatcherReport.status) == status
        statement = select(WatcherReport).where(condition).order_by(col(WatcherReport.id))
        return list(self.session.exec(statement).all())

    def count_by_user(self, user_id: int) -> int:
        return len(self.list_by_user(user_id))

    def save(self, report: WatcherReport) -> WatcherReport:
        """
        校验并保存单条报告

        Args:
            report: 报告对象

        Returns:
            已 flush 的报告对象

        Raises:
            ValidationError: 报告未通过校验
            PersistenceError: 写入失败（包括 user_id 唯一约束冲突）
        """
        validate_report(report)
        try:
            self.session.add(report)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error("观察员报告写入失败 (user_id=%s): %s", report.user_id, e)
            raise PersistenceError(
                "观察员报告写入失败",
                details={"user_id": report.user_id, "error": str(e)}
            ) from e
        return report

    def bulk_update_status(self, user_id: int, status: WatcherStatus) -> int:
        """
        批量改写用户所有报告的 status

        直接执行一条 UPDATE，不走单条校验路径

        Returns:
            受影响的行数

        Raises:
            PersistenceError: UPDATE 执行失败
        """
        statement = (
            update(WatcherReport)
            .where(col(WatcherReport.user_id) == user_id)
            .values(status=status)
        )
        try:
            result = self.session.exec(statement)
        except SQLAlchemyError as e:
            logger.error("批量更新报告状态失败 (user_id=%s, status=%s): %s", user_id, status.value, e)
            raise PersistenceError(
                "批量更新报告状态失败",
                details={"user_id": user_id, "status": status.value, "error": str(e)}
            ) from e
        return result.rowcount
