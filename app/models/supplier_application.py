"""ORM model for supplier registrations awaiting review."""

from sqlalchemy import Column, Integer, String, Text

from app.models.account import email_lower_index
from app.models.base import Base, TimestampMixin

APPLICATION_STATUS_PENDING = 1
APPLICATION_STATUS_REJECTED = 2
APPLICATION_STATUS_APPROVED = 3


class SupplierApplication(TimestampMixin, Base):
    """
    A supplier registration. Approval copies it into `suppliers`; until then the
    applicant can sign in only far enough to learn the application's status.
    """

    __tablename__ = "supplier_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False)
    cell = Column(String(64), nullable=True)
    telephone = Column(String(64), nullable=True)
    address = Column(Text, nullable=True)
    reg = Column(String(64), nullable=True)
    password_hash = Column(String(255), nullable=True)
    status = Column(Integer, nullable=False, default=APPLICATION_STATUS_PENDING)
    reason = Column(Text, nullable=True)


email_lower_index(SupplierApplication)
