"""ORM model for persisted refresh tokens (one row per session, rotated in place)."""

from sqlalchemy import Column, DateTime, Index, Integer, String, func

from app.models.base import Base


class RefreshToken(Base):
    """Opaque refresh token bound to one account of one account class."""

    __tablename__ = "refresh_tokens"
    __table_args__ = (Index("ix_refresh_tokens_account", "account_kind", "account_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_kind = Column(String(32), nullable=False)
    account_id = Column(Integer, nullable=False)
    token = Column(String(128), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
