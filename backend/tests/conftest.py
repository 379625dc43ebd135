"""
Pytest 测试配置
提供测试数据库、测试用户、委员会和位置等测试基础设施
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest
from sqlmodel import Session, create_engine

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from watchsync.db.init_db import create_tables
from watchsync.models import User, UserRole, WatcherStatus, Commission, UserLocation


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False}
    )

    create_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_user(test_db_session: Session) -> User:
    """
    创建测试观察员
    """
    user = User(
        email="watcher@example.com",
        name="Иван Петров",
        role=UserRole.WATCHER,
        is_watcher=True,
        watcher_status=WatcherStatus.PENDING
    )
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def other_user(test_db_session: Session) -> User:
    """
    创建另一个观察员，用于验证级联不越界
    """
    user = User(
        email="other@example.com",
        is_watcher=True,
        watcher_status=WatcherStatus.PENDING
    )
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_commissions(test_db_session: Session) -> list[Commission]:
    """
    创建两个委员会 C1、C2
    """
    commissions = [
        Commission(number="УИК 101", region="Москва"),
        Commission(number="УИК 202", region="Москва"),
    ]
    for commission in commissions:
        test_db_session.add(commission)
    test_db_session.commit()
    for commission in commissions:
        test_db_session.refresh(commission)
    return commissions


@pytest.fixture(scope="function")
def test_locations(test_db_session: Session, test_user: User, test_commissions: list[Commission]) -> list[UserLocation]:
    """
    为测试用户创建位置记录：L1(t=1, C1)、L2(t=2, C2)
    """
    locations = [
        UserLocation(
            user_id=test_user.id,
            commission_id=test_commissions[0].id,
            created_at=datetime.fromtimestamp(1, tz=timezone.utc)
        ),
        UserLocation(
            user_id=test_user.id,
            commission_id=test_commissions[1].id,
            created_at=datetime.fromtimestamp(2, tz=timezone.utc)
        ),
    ]
    for location in locations:
        test_db_session.add(location)
    test_db_session.commit()
    for location in locations:
        test_db_session.refresh(location)
    return locations


@pytest.fixture(scope="function")
def valid_payload() -> dict:
    return {"timestamp": "1700000000", "key": "battery", "value": "87"}


# ==================== Repository / Service Fixtures ====================

@pytest.fixture(scope="function")
def user_repository(test_db_session: Session):
    from watchsync.repositories.user_repository import UserRepository
    return UserRepository(test_db_session)


@pytest.fixture(scope="function")
def location_repository(test_db_session: Session):
    from watchsync.repositories.location_repository import LocationRepository
    return LocationRepository(test_db_session)


@pytest.fixture(scope="function")
def commission_repository(test_db_session: Session):
    from watchsync.repositories.location_repository import CommissionRepository
    return CommissionRepository(test_db_session)


@pytest.fixture(scope="function")
def device_message_repository(test_db_session: Session):
    from watchsync.repositories.device_message_repository import DeviceMessageRepository
    return DeviceMessageRepository(test_db_session)


@pytest.fixture(scope="function")
def report_repository(test_db_session: Session):
    from watchsync.repositories.report_repository import ReportRepository
    return ReportRepository(test_db_session)


@pytest.fixture(scope="function")
def sync_service(test_db_session: Session):
    from watchsync.services.watcher_service import WatcherSyncService
    return WatcherSyncService(test_db_session)


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
