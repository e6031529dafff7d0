"""ORM models for the three account classes (admins, suppliers, mobile users)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin


def email_lower_index(model) -> Index:
    """Unique index on lower(email): addresses that differ only in case are one login."""
    table = model.__table__
    return Index(f"uq_{table.name}_email_lower", func.lower(table.c.email), unique=True)


class AccountMixin(TimestampMixin):
    """
    Credential and lockout columns shared by every account class.

    failed_attempts: consecutive wrong passwords since the last reset
    locked_until: account rejects logins while now < locked_until
    lockout_stage: number of lockouts applied so far (progressive lockout level)
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    failed_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True), nullable=True)
    lockout_stage = Column(Integer, nullable=False, default=0)


class Admin(AccountMixin, Base):
    """Control-panel administrator; permissions come from its role."""

    __tablename__ = "admins"

    name = Column(String(255), nullable=False, default="")
    surname = Column(String(255), nullable=False, default="")
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)

    role = relationship("Role")


class Supplier(AccountMixin, Base):
    """Approved supplier account for the supplier portal."""

    __tablename__ = "suppliers"

    name = Column(String(255), nullable=False, default="")
    cellphone = Column(String(64), nullable=True)
    telephone = Column(String(64), nullable=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)

    role = relationship("Role")


class MobileUser(AccountMixin, Base):
    """Mobile app user (email/password provider). Has no role."""

    __tablename__ = "mobile_users"

    name = Column(String(255), nullable=False, default="")
    surname = Column(String(255), nullable=False, default="")
    cell = Column(String(64), nullable=True)


for _model in (Admin, Supplier, MobileUser):
    email_lower_index(_model)
