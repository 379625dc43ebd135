"""
异常层级

所有核心失败都同步抛给触发方（消息接入端 / 审核端），不做吞掉和自动重试。
每个异常带有确定性的错误码，便于上层映射为 API 响应。

错误码:
- WS_MALFORMED_PAYLOAD: 设备消息缺少或包含非法必填字段
- WS_INVALID_STATUS: 审核状态不在枚举范围内
- WS_USER_NOT_FOUND: 用户不存在
- WS_PERSISTENCE_ERROR: 底层存储写入失败
- WS_REPORT_INVALID: 报告在重新保存时未通过自身校验
"""

from typing import Any, Dict, Optional

__all__ = [
    "WatchSyncError",
    "MalformedPayload",
    "InvalidStatus",
    "UserNotFound",
    "PersistenceError",
    "ValidationError",
]


class WatchSyncError(Exception):
    """
    所有 watchsync 异常的基类

    属性:
    - code: 确定性的错误码 (WS_*)
    - message: 可读的错误描述
    - details: 附加上下文
    """

    code: str = "WS_INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}

    def to_dict(self) -> Dict[str, Any]:
        """
        序列化为字典

        Returns:
            包含 code、message、details 的字典
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class MalformedPayload(WatchSyncError):
    """设备消息 payload 缺少字段或字段非法，消息不会被持久化"""
    code = "WS_MALFORMED_PAYLOAD"


class InvalidStatus(WatchSyncError):
    """目标审核状态不在六个枚举值之内，在修改 User 之前拒绝"""
    code = "WS_INVALID_STATUS"


class UserNotFound(WatchSyncError):
    code = "WS_USER_NOT_FOUND"


class PersistenceError(WatchSyncError):
    """存储层写入失败，整个触发操作失败"""
    code = "WS_PERSISTENCE_ERROR"


class ValidationError(WatchSyncError):
    """
    报告未通过自身校验

    在 approved 分支的逐条重新保存中抛出，剩余报告不再处理。
    """
    code = "WS_REPORT_INVALID"
