"""
服务层模块
提供报告投影、状态级联和同步编排
"""

from .commission_resolver import CommissionResolver
from .report_projector import ReportProjector, parse_timestamp, validate_payload
from .status_cascade import StatusCascade, CascadeAction, CASCADE_ACTIONS, coerce_watcher_status
from .watcher_service import WatcherSyncService

__all__ = [
    "CommissionResolver",
    "ReportProjector", "parse_timestamp", "validate_payload",
    "StatusCascade", "CascadeAction", "CASCADE_ACTIONS", "coerce_watcher_status",
    "WatcherSyncService"
]
