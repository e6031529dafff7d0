"""ORM model for the append-only login audit trail."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from app.models.base import Base


class LoginLog(Base):
    """
    One row per login attempt. Written once, never updated.

    account_id is NULL when the email matched no account.
    """

    __tablename__ = "login_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_kind = Column(String(32), nullable=False)
    account_id = Column(Integer, nullable=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    success = Column(Boolean, nullable=False, default=False)
    failure_reason = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
