"""
设备消息 Repository

写操作只 flush 不 commit，事务边界由 WatcherSyncService 掌握，
保证"写消息"与"投影报告"同成同败。
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlmodel import Session, select, col

from watchsync.models.device_message import DeviceMessage
from watchsync.models.report import WatcherReport


class DeviceMessageRepository:
    """
    设备消息数据访问对象
    消息只追加，不提供更新方法
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def create(self, user_id: int, payload: Dict[str, Any]) -> DeviceMessage:
        """
        写入设备消息并 flush 以获得 ID

        Args:
            user_id: 用户 ID
            payload: 键值 payload

        Returns:
            已 flush 的 DeviceMessage 对象
        """
        message = DeviceMessage(user_id=user_id, message=dict(payload))
        self.session.add(message)
        self.session.flush()
        return message

    def get_by_id(self, message_id: int) -> Optional[DeviceMessage]:
        return self.session.get(DeviceMessage, message_id)

    def list_by_user(self, user_id: int) -> List[DeviceMessage]:
        """
        获取用户的所有设备消息，按写入顺序
        """
        statement = (
            select(DeviceMessage)
            .where(DeviceMessage.user_id == user_id)
            .order_by(col(DeviceMessage.id))
        )
        return list(self.session.exec(statement).all())

    def count_by_user(self, user_id: int) -> int:
        return len(self.list_by_user(user_id))

    def delete(self, message_id: int) -> bool:
        """
        删除设备消息，连同以它为来源的观察员报告

        Returns:
            删除成功返回 True，消息不存在返回 False
        """
        message = self.get_by_id(message_id)
        if message is None:
            return False

        self.session.exec(
            delete(WatcherReport).where(col(WatcherReport.device_message_id) == message_id)
        )
        self.session.delete(message)
        self.session.flush()
        return True
