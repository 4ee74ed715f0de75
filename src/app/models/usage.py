from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from app.db.base import Base

class ApiUsage(Base):
    """使用审计表 - 只追加，写入后不可修改。每次计费操作写入一条。"""
    __tablename__ = 'api_usage'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    service = Column(String(64), nullable=False, comment="Operation label, e.g. 'credits' or 'content_upload'")
    credits_used = Column(Integer, nullable=False, default=0)
    success = Column(Boolean, nullable=False, default=True)
    timestamp = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    profile = relationship("Profile", back_populates="usage_entries")
