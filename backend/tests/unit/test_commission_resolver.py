"""
CommissionResolver 单元测试
验证当前委员会解析、并列时间的确定性和实例级缓存
"""

from datetime import datetime, timezone

from watchsync.repositories.location_repository import LocationRepository
from watchsync.services.commission_resolver import CommissionResolver


class TestCommissionResolver:
    """测试 CommissionResolver"""

    def test_resolves_latest_location(self, test_db_session, test_user, test_commissions, test_locations):
        """测试：L1(t=1, C1)、L2(t=2, C2) 解析为 C2"""
        resolver = CommissionResolver(test_db_session)

        commission = resolver.resolve(test_user.id)

        assert commission.id == test_commissions[1].id
        assert resolver.current_location(test_user.id).id == test_locations[1].id

    def test_insertion_order_does_not_matter(self, test_db_session, test_user, test_commissions):
        """测试：先插入较新的位置，仍按创建时间解析"""
        repo = LocationRepository(test_db_session)
        repo.create(test_user.id, test_commissions[0].id, created_at=datetime(2024, 3, 17, tzinfo=timezone.utc))
        repo.create(test_user.id, test_commissions[1].id, created_at=datetime(2024, 3, 1, tzinfo=timezone.utc))

        assert CommissionResolver(test_db_session).resolve(test_user.id).id == test_commissions[0].id

    def test_tie_break_by_highest_id(self, test_db_session, test_user, test_commissions):
        """测试：创建时间相同时取 ID 最大的位置"""
        repo = LocationRepository(test_db_session)
        same_time = datetime(2024, 3, 17, 8, 0, tzinfo=timezone.utc)
        repo.create(test_user.id, test_commissions[1].id, created_at=same_time)
        repo.create(test_user.id, test_commissions[0].id, created_at=same_time)

        assert CommissionResolver(test_db_session).resolve(test_user.id).id == test_commissions[0].id

    def test_user_without_locations(self, test_db_session, test_user):
        """测试：没有位置记录时返回 None"""
        resolver = CommissionResolver(test_db_session)

        assert resolver.resolve(test_user.id) is None
        assert resolver.current_location(test_user.id) is None

    def test_memoized_within_instance(self, test_db_session, test_user, test_commissions, test_locations):
        """测试：同一实例内结果被缓存，直到 invalidate"""
        resolver = CommissionResolver(test_db_session)
        assert resolver.resolve(test_user.id).id == test_commissions[1].id

        # 绕过 resolver 写入更新的位置
        LocationRepository(test_db_session).create(
            test_user.id, test_commissions[0].id, created_at=datetime.fromtimestamp(3, tz=timezone.utc)
        )
        assert resolver.resolve(test_user.id).id == test_commissions[1].id

        resolver.invalidate(test_user.id)
        assert resolver.resolve(test_user.id).id == test_commissions[0].id

    def test_location_write_invalidates_resolver(self, test_db_session, test_user, test_commissions, test_locations):
        """测试：通过 LocationRepository 写入时传入 resolver 会使缓存失效"""
        resolver = CommissionResolver(test_db_session)
        assert resolver.resolve(test_user.id).id == test_commissions[1].id

        LocationRepository(test_db_session).create(
            test_user.id,
            test_commissions[0].id,
            created_at=datetime.fromtimestamp(3, tz=timezone.utc),
            resolver=resolver
        )

        assert resolver.resolve(test_user.id).id == test_commissions[0].id

    def test_new_instance_sees_new_location(self, test_db_session, test_user, test_commissions, test_locations):
        """测试：缓存不跨实例"""
        assert CommissionResolver(test_db_session).resolve(test_user.id).id == test_commissions[1].id

        LocationRepository(test_db_session).create(
            test_user.id, test_commissions[0].id, created_at=datetime.fromtimestamp(3, tz=timezone.utc)
        )

        assert CommissionResolver(test_db_session).resolve(test_user.id).id == test_commissions[0].id

    def test_invalidate_all(self, test_db_session, test_user):
        """测试：不传 user_id 时清空全部缓存"""
        resolver = CommissionResolver(test_db_session)
        resolver.resolve(test_user.id)

        resolver.invalidate()

        assert resolver._current_locations == {}
