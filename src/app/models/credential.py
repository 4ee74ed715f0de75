import enum
from sqlalchemy import Column, Integer, String, Text, JSON, Enum, ForeignKey, DateTime, func, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base

class ServiceName(str, enum.Enum):
    """The closed set of third-party services whose keys can be verified and stored."""
    GEMINI = "gemini"
    UNDETECTABLE = "undetectable"
    SAPLING = "sapling"
    RESEND = "resend"
    PHANTOM = "phantom"
    APIFY = "apify"
    UPLOAD_POST = "uploadPost"

class CredentialStatus(str, enum.Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"

class VerifiedApiKey(Base):
    """
    已验证的第三方 API Key。
    每个 (user_id, service) 至多一条记录，后一次验证覆盖前一次 (upsert，无历史)。
    """
    __tablename__ = 'verified_api_keys'

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    service = Column(Enum(ServiceName, values_callable=lambda e: [m.value for m in e], native_enum=False, length=32), nullable=False)

    # [安全] Fernet 加密后的密文，绝不落明文
    api_key = Column(Text, nullable=False, comment="Encrypted secret")
    status = Column(Enum(CredentialStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20), nullable=False, default=CredentialStatus.VERIFIED)
    tested_at = Column(DateTime, nullable=False, server_default=func.now())
    extra_params = Column(JSON, nullable=False, default=dict, comment="Auxiliary parameters, e.g. senderEmail or phantomId")

    profile = relationship("Profile", back_populates="verified_api_keys")

    __table_args__ = (
        UniqueConstraint('user_id', 'service', name='uq_verified_api_keys_user_service'),
    )
