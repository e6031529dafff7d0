"""Shared fixtures for database and API tests: in-memory SQLite plus row builders."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import (
    Admin,
    Base,
    MobileUser,
    Module,
    Role,
    RolePermission,
    Supplier,
    SupplierApplication,
)
from app.models.supplier_application import APPLICATION_STATUS_PENDING
from app.schemas.auth import AccountKind, build_principal

PASSWORD = "correct-horse-battery"

_FLAGS = {"r": "can_read", "c": "can_create", "u": "can_update", "d": "can_delete"}


def create_role(
    db: Session, role_name: str = "Operations", status: int = 1, grants: dict[str, str] | None = None
) -> Role:
    """Role with grants like {"administration": "ru"} (r/c/u/d letters)."""
    role = Role(role_name=role_name, description=f"{role_name} role", status=status)
    db.add(role)
    db.flush()
    for module_name, letters in (grants or {}).items():
        module = db.execute(select(Module).where(Module.module_name == module_name)).scalar_one_or_none()
        if module is None:
            module = Module(module_name=module_name)
            db.add(module)
            db.flush()
        db.add(
            RolePermission(
                role_id=role.id,
                module_id=module.id,
                **{flag: letter in letters for letter, flag in _FLAGS.items()},
            )
        )
    db.commit()
    return role


def _account_defaults(email: str, password: str | None, is_active: bool) -> dict:
    return {
        "email": email,
        "password_hash": hash_password(password) if password is not None else None,
        "is_active": is_active,
        "failed_attempts": 0,
        "locked_until": None,
        "lockout_stage": 0,
    }


def create_admin(
    db: Session,
    email: str = "a@x.com",
    password: str | None = PASSWORD,
    role: Role | None = None,
    is_active: bool = True,
) -> Admin:
    admin = Admin(
        name="Ada",
        surname="Admin",
        role_id=role.id if role is not None else None,
        **_account_defaults(email, password, is_active),
    )
    db.add(admin)
    db.commit()
    return admin


def create_supplier(
    db: Session,
    email: str = "s@x.com",
    password: str | None = PASSWORD,
    role: Role | None = None,
    is_active: bool = True,
) -> Supplier:
    supplier = Supplier(
        name="Acme Parts",
        cellphone="0820000000",
        role_id=role.id if role is not None else None,
        **_account_defaults(email, password, is_active),
    )
    db.add(supplier)
    db.commit()
    return supplier


def create_mobile_user(
    db: Session, email: str = "m@x.com", password: str | None = PASSWORD, is_active: bool = True
) -> MobileUser:
    user = MobileUser(
        name="Mo",
        surname="Bile",
        cell="0830000000",
        **_account_defaults(email, password, is_active),
    )
    db.add(user)
    db.commit()
    return user


def create_supplier_application(
    db: Session,
    email: str = "apply@x.com",
    password: str = PASSWORD,
    status: int = APPLICATION_STATUS_PENDING,
) -> SupplierApplication:
    application = SupplierApplication(
        name="Newco Spares",
        email=email,
        cell="0840000000",
        password_hash=hash_password(password),
        status=status,
    )
    db.add(application)
    db.commit()
    return application


def bearer(kind: AccountKind, account_id: int, email: str) -> dict[str, str]:
    token = create_access_token(build_principal(kind, account_id, email))
    return {"Authorization": f"Bearer {token}"}


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory schema per test; self.db is a session on it."""

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def reload(self, instance):
        """Re-read a row after another session committed changes to it."""
        self.db.expire_all()
        return self.db.get(type(instance), instance.id)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose requests use the same database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.client.close()
        super().tearDown()
