"""
数据库初始化脚本
负责读取连接配置、创建引擎和表结构
"""

import logging
import os
from pathlib import Path

from sqlmodel import SQLModel, create_engine

# 导入模型以注册到 SQLModel.metadata
from watchsync.models import (  # noqa: F401
    User, Commission, UserLocation, DeviceMessage, WatcherReport
)

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用 DATABASE_URL，其次 DATABASE_PATH 指定的 SQLite 文件
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    db_path = os.environ.get("DATABASE_PATH", "database.db")
    # 相对路径从项目根目录解析
    if not os.path.isabs(db_path):
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def get_engine():
    """
    创建并返回数据库引擎
    """
    database_url = get_database_url()
    echo = os.environ.get("DATABASE_ECHO", "").strip().lower() in _TRUTHY

    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # SQLite 特有配置

    return create_engine(database_url, echo=echo, connect_args=connect_args)


def create_tables(engine) -> None:
    """
    创建所有数据库表
    """
    SQLModel.metadata.create_all(engine)
    logger.info("数据库表创建完成: %s", engine.url)


def init_db():
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构

    Returns:
        创建好的引擎
    """
    engine = get_engine()
    create_tables(engine)
    return engine


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
