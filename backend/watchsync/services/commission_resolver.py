"""
当前委员会解析

用户当前所属委员会 = created_at 最新的位置记录所关联的委员会。
created_at 相同时取 ID 最大的一条。
"""

from typing import Dict, Optional

from sqlmodel import Session

from watchsync.models.commission import Commission
from watchsync.models.location import UserLocation
from watchsync.repositories.location_repository import CommissionRepository, LocationRepository

_MISSING = object()


class CommissionResolver:
    """
    委员会解析器，纯读取

    缓存只在实例内有效，一个请求/操作使用一个实例；
    同一实例生命周期内用户位置发生变化时必须调用 invalidate()。
    """

    def __init__(self, session: Session):
        self.session = session
        self.locations = LocationRepository(session)
        self.commissions = CommissionRepository(session)
        self._current_locations: Dict[int, Optional[UserLocation]] = {}

    def current_location(self, user_id: int) -> Optional[UserLocation]:
        """
        获取用户最新的位置记录

        Args:
            user_id: 用户 ID

        Returns:
            UserLocation 对象，用户没有位置记录时返回 None
        """
        location = self._current_locations.get(user_id, _MISSING)
        if location is _MISSING:
            location = self.locations.get_latest_by_user(user_id)
            self._current_locations[user_id] = location
        return location

    def resolve(self, user_id: int) -> Optional[Commission]:
        """
        解析用户当前所属委员会

        Args:
            user_id: 用户 ID

        Returns:
            Commission 对象，用户没有位置记录时返回 None
        """
        location = self.current_location(user_id)
        if location is None:
            return None
        return self.commissions.get_by_id(location.commission_id)

    def invalidate(self, user_id: Optional[int] = None) -> None:
        """丢弃缓存；不传 user_id 时清空全部"""
        if user_id is None:
            self._current_locations.clear()
        else:
            self._current_locations.pop(user_id, None)
