"""
数据库模块
提供数据库连接和初始化功能
"""

from .init_db import init_db, get_engine, get_database_url, create_tables

__all__ = [
    "init_db",
    "get_engine",
    "get_database_url",
    "create_tables"
]
