"""
选举委员会模型
对核心来说是不透明引用，通过用户最近的位置记录解析
"""

from typing import Optional

from sqlmodel import Field

from .base import TimestampModel


class Commission(TimestampModel, table=True):
    __tablename__ = "commissions"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 委员会编号，如 "УИК 1234"
    number: str = Field(unique=True, index=True, nullable=False)

    # 所属地区
    region: Optional[str] = Field(default=None)
