"""
观察员同步服务层

显式编排两条写入流程，每条流程一个事务：
1. 设备消息接入：校验 payload -> 写入消息 -> 投影报告 -> 提交
2. 审核状态变更：校验状态 -> 写入用户 -> 级联报告 -> 提交

任一步失败都回滚整个事务并把异常抛给调用方。
"""

import logging
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from watchsync.exceptions import PersistenceError, UserNotFound, WatchSyncError
from watchsync.models.user import User, WatcherStatus
from watchsync.repositories.device_message_repository import DeviceMessageRepository
from watchsync.repositories.user_repository import UserRepository
from watchsync.services.commission_resolver import CommissionResolver
from watchsync.services.report_projector import ReportProjector, validate_payload
from watchsync.services.status_cascade import StatusCascade, coerce_watcher_status

logger = logging.getLogger(__name__)


class WatcherSyncService:
    """
    观察员同步服务

    使用示例：
        with Session(get_engine()) as session:
            service = WatcherSyncService(session)
            message_id = service.create_device_message(user_id, {"timestamp": "1700000000", "key": "battery", "value": "87"})
            service.set_user_watcher_status(user_id, "rejected")
    """

    def __init__(self, session: Session):
        """
        Args:
            session: SQLModel 数据库会话，服务负责其提交与回滚
        """
        self.session = session
        self.users = UserRepository(session)
        self.messages = DeviceMessageRepository(session)

    def _get_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"用户不存在 (ID: {user_id})", details={"user_id": user_id})
        return user

    def create_device_message(self, user_id: int, payload: Mapping[str, Any]) -> int:
        """
        接入一条设备消息并同步观察员报告

        Args:
            user_id: 用户 ID
            payload: 键值 payload，至少包含 timestamp / key / value

        Returns:
            新设备消息的 ID

        Raises:
            MalformedPayload: payload 非法，不写入任何记录
            UserNotFound: 用户不存在
            PersistenceError: 写入失败，消息与报告均回滚
        """
        try:
            validate_payload(payload)
        except WatchSyncError as e:
            logger.warning("拒绝设备消息 (user_id=%s): %s", user_id, e.message)
            raise

        # 每次接入使用新的解析器，缓存不跨请求
        projector = ReportProjector(self.session, CommissionResolver(self.session))
        try:
            self._get_user(user_id)
            message = self.messages.create(user_id, payload)
            message_id = message.id
            projector.project(message)
            self.session.commit()
        except WatchSyncError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("设备消息写入失败 (user_id=%s)", user_id)
            raise PersistenceError(
                "设备消息写入失败",
                details={"user_id": user_id, "error": str(e)}
            ) from e

        return message_id

    def set_user_watcher_status(self, user_id: int, new_status: Any) -> User:
        """
        修改用户审核状态并级联到其报告

        状态未变化时不写入任何报告

        Args:
            user_id: 用户 ID
            new_status: 目标状态（WatcherStatus 或其字符串值）

        Returns:
            更新后的 User 对象

        Raises:
            InvalidStatus: 状态不在枚举范围内，用户不被修改
            UserNotFound: 用户不存在
            ValidationError: approved 分支中报告校验失败，整体回滚
            PersistenceError: 写入失败，整体回滚
        """
        try:
            status = coerce_watcher_status(new_status)
        except WatchSyncError as e:
            logger.warning("拒绝审核状态变更 (user_id=%s): %s", user_id, e.message)
            raise

        try:
            user = self._get_user(user_id)
            old_status = user.watcher_status or WatcherStatus.NONE
            if old_status == status:
                logger.info("审核状态未变化，跳过级联 (user_id=%s, status=%s)", user_id, status.value)
                return user

            user.watcher_status = status
            self.session.add(user)
            self.session.flush()
            StatusCascade(self.session).on_status_changed(user, old_status, status)
            self.session.commit()
        except WatchSyncError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("审核状态写入失败 (user_id=%s)", user_id)
            raise PersistenceError(
                "审核状态写入失败",
                details={"user_id": user_id, "status": status.value, "error": str(e)}
            ) from e

        self.session.refresh(user)
        logger.info("审核状态已变更 (user_id=%s): %s -> %s", user_id, old_status.value, status.value)
        return user

    def delete_device_message(self, message_id: int) -> bool:
        """
        删除设备消息及以它为来源的报告

        Returns:
            删除成功返回 True，消息不存在返回 False
        """
        try:
            deleted = self.messages.delete(message_id)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                "设备消息删除失败",
                details={"message_id": message_id, "error": str(e)}
            ) from e
        return deleted

    def delete_user(self, user_id: int) -> bool:
        """
        删除用户及其设备消息、报告和位置记录

        Returns:
            删除成功返回 True，用户不存在返回 False
        """
        try:
            return self.users.delete(user_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(
                "用户删除失败",
                details={"user_id": user_id, "error": str(e)}
            ) from e
