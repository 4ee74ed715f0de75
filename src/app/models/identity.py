import enum
from sqlalchemy import Column, Integer, String, Enum, DateTime, func, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base

class PlanTier(str, enum.Enum):
    """
    Subscription tiers. Only FREE is metered; every other tier is unlimited.
    Using str as a mixin keeps the enum JSON serializable.
    """
    FREE = "free"
    CREATOR = "creator"
    PRO = "pro"
    AGENCY = "agency"

    @property
    def is_unlimited(self) -> bool:
        return self is not PlanTier.FREE

class Profile(Base):
    """用户资料表 - 同时承担 Credit Account 的职责 (余额 + 套餐)。"""
    __tablename__ = 'profiles'

    # 外部身份提供商签发的用户ID，对本服务而言是不透明的
    id = Column(String(64), primary_key=True, comment="Opaque user id issued by the identity provider")
    email = Column(String(255), nullable=True, index=True)

    # [计费核心] 仅在 plan == free 时有意义
    credits = Column(Integer, nullable=False, default=0, comment="Remaining credit balance (free plan only)")
    plan = Column(Enum(PlanTier, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20), nullable=False, default=PlanTier.FREE)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    verified_api_keys = relationship("VerifiedApiKey", back_populates="profile", cascade="all, delete-orphan")
    usage_entries = relationship("ApiUsage", back_populates="profile")

    __table_args__ = (
        CheckConstraint('credits >= 0', name='credits_non_negative'),
    )
