"""
委员会与位置记录 Repository
核心只读取位置，这里的写方法供身份系统和测试使用
"""

from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from sqlmodel import Session, select, col

from watchsync.models.commission import Commission
from watchsync.models.location import UserLocation

if TYPE_CHECKING:
    from watchsync.services.commission_resolver import CommissionResolver


class CommissionRepository:
    """
    委员会数据访问对象
    """

    def __init__(self, session: Session):
        self.session = session

    def create(self, number: str, region: Optional[str] = None) -> Commission:
        commission = Commission(number=number, region=region)
        self.session.add(commission)
        self.session.commit()
        self.session.refresh(commission)
        return commission

    def get_by_id(self, commission_id: int) -> Optional[Commission]:
        return self.session.get(Commission, commission_id)

    def get_by_number(self, number: str) -> Optional[Commission]:
        statement = select(Commission).where(Commission.number == number)
        return self.session.exec(statement).first()


class LocationRepository:
    """
    位置记录数据访问对象
    """

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: int,
        commission_id: int,
        created_at: Optional[datetime] = None,
        resolver: Optional["CommissionResolver"] = None
    ) -> UserLocation:
        """
        为用户新增位置记录

        Args:
            user_id: 用户 ID
            commission_id: 委员会 ID
            created_at: 创建时间（可选，默认当前时间）
            resolver: 正在使用的 CommissionResolver，写入后使其缓存失效

        Returns:
            创建的 UserLocation 对象
        """
        location = UserLocation(user_id=user_id, commission_id=commission_id)
        if created_at is not None:
            location.created_at = created_at
        self.session.add(location)
        self.session.commit()
        self.session.refresh(location)

        if resolver is not None:
            resolver.invalidate(user_id)
        return location

    def list_by_user(self, user_id: int) -> List[UserLocation]:
        """
        获取用户的所有位置记录，最新在前

        created_at 相同时按 ID 倒序，保证顺序确定
        """
        statement = (
            select(UserLocation)
            .where(UserLocation.user_id == user_id)
            .order_by(col(UserLocation.created_at).desc(), col(UserLocation.id).desc())
        )
        return list(self.session.exec(statement).all())

    def get_latest_by_user(self, user_id: int) -> Optional[UserLocation]:
        statement = (
            select(UserLocation)
            .where(UserLocation.user_id == user_id)
            .order_by(col(UserLocation.created_at).desc(), col(UserLocation.id).desc())
            .limit(1)
        )
        return self.session.exec(statement).first()
