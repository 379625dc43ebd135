"""
用户 Repository
提供 users 表的增删改查以及观察员相关查询
"""

from typing import List, Optional

from sqlalchemy import delete, distinct, func, or_
from sqlmodel import Session, select, col

from watchsync.models.device_message import DeviceMessage
from watchsync.models.location import UserLocation
from watchsync.models.report import WatcherReport
from watchsync.models.user import User, UserRole, WatcherStatus

# 审核状态 -> 查询条件，逐项列出
# none 同时匹配历史数据中的 NULL 和空字符串
WATCHER_STATUS_FILTERS = {
    WatcherStatus.PENDING: col(User.watcher_status) == WatcherStatus.PENDING,
    WatcherStatus.APPROVED: col(User.watcher_status) == WatcherStatus.APPROVED,
    WatcherStatus.REJECTED: col(User.watcher_status) == WatcherStatus.REJECTED,
    WatcherStatus.PROBLEM: col(User.watcher_status) == WatcherStatus.PROBLEM,
    WatcherStatus.BLOCKED: col(User.watcher_status) == WatcherStatus.BLOCKED,
    WatcherStatus.NONE: or_(
        col(User.watcher_status) == WatcherStatus.NONE,
        col(User.watcher_status).is_(None),
        func.trim(col(User.watcher_status)) == ""
    ),
}


class UserRepository:
    """
    用户数据访问对象
    封装所有与 users 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def create(
        self,
        email: str,
        name: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_watcher: bool = False,
        watcher_status: WatcherStatus = WatcherStatus.NONE
    ) -> User:
        """
        创建新用户

        Args:
            email: 邮箱（必须唯一）
            name: 展示名称（可选）
            role: 角色（可选）
            is_watcher: 是否观察员
            watcher_status: 初始审核状态

        Returns:
            创建的 User 对象
        """
        user = User(
            email=email,
            name=name,
            role=role,
            is_watcher=is_watcher,
            watcher_status=watcher_status
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def list_watchers(self, status: Optional[WatcherStatus] = None) -> List[User]:
        """
        获取观察员列表

        Args:
            status: 按审核状态过滤（可选）

        Returns:
            User 对象列表，按 ID 排序
        """
        statement = select(User).where(col(User.is_watcher) == True)  # noqa: E712
        if status is not None:
            statement = statement.where(WATCHER_STATUS_FILTERS[status])
        statement = statement.order_by(col(User.id))
        return list(self.session.exec(statement).all())

    def list_by_role(self, role: UserRole) -> List[User]:
        statement = select(User).where(User.role == role).order_by(col(User.id))
        return list(self.session.exec(statement).all())

    def count_active(self) -> int:
        """
        统计至少发送过一条设备消息的用户数

        每次调用都实时查询，不做缓存
        """
        statement = select(func.count(distinct(DeviceMessage.user_id)))
        return self.session.exec(statement).one()

    def delete(self, user_id: int) -> bool:
        """
        删除用户及其设备消息、观察员报告和位置记录

        Args:
            user_id: 用户 ID

        Returns:
            删除成功返回 True，用户不存在返回 False
        """
        user = self.get_by_id(user_id)
        if user is None:
            return False

        # 报告引用设备消息，先删报告
        self.session.exec(delete(WatcherReport).where(col(WatcherReport.user_id) == user_id))
        self.session.exec(delete(DeviceMessage).where(col(DeviceMessage.user_id) == user_id))
        self.session.exec(delete(UserLocation).where(col(UserLocation.user_id) == user_id))
        self.session.delete(user)
        self.session.commit()
        return True
