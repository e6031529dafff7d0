"""ORM models for roles, modules and role × module permission grants."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint

from app.models.base import Base

ROLE_STATUS_ACTIVE = 1


class Role(Base):
    """Named role; status != 1 blocks every account holding it."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    status = Column(Integer, nullable=False, default=ROLE_STATUS_ACTIVE)

    @property
    def is_blocked(self) -> bool:
        return self.status != ROLE_STATUS_ACTIVE


class Module(Base):
    """Permission-gated area of the backend (e.g. 'administration', 'orders')."""

    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    module_name = Column(String(255), nullable=False, unique=True)


class RolePermission(Base):
    """CRUD capabilities of one role on one module. Missing row = no capability."""

    __tablename__ = "role_module_permissions"
    __table_args__ = (UniqueConstraint("role_id", "module_id", name="uq_role_module"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False)
    can_read = Column(Boolean, nullable=False, default=False)
    can_create = Column(Boolean, nullable=False, default=False)
    can_update = Column(Boolean, nullable=False, default=False)
    can_delete = Column(Boolean, nullable=False, default=False)
