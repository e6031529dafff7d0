"""
Create an admin (e.g. the first one). Run from project root:
  python -m app.scripts.create_admin EMAIL PASSWORD [--name NAME] [--surname SURNAME]
      [--role ROLE_NAME] [--module MODULE ...]
Example:
  python -m app.scripts.create_admin ops@partsbay.com your-secure-password \
      --role "Super Admin" --module administration --module suppliers \
      --module users --module "roles & permissions"

With --role, the role is created if missing and granted full CRUD on every --module.
"""
import argparse
import sys

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models import Admin, Module, Role, RolePermission


def _get_or_create_role(db: Session, role_name: str, modules: list[str]) -> Role:
    role = db.execute(select(Role).where(Role.role_name == role_name)).scalar_one_or_none()
    if role is None:
        role = Role(role_name=role_name, description="Created by create_admin")
        db.add(role)
        db.flush()
    for module_name in modules:
        module = db.execute(
            select(Module).where(func.lower(Module.module_name) == module_name.lower())
        ).scalar_one_or_none()
        if module is None:
            module = Module(module_name=module_name)
            db.add(module)
            db.flush()
        grant = db.execute(
            select(RolePermission).where(
                RolePermission.role_id == role.id, RolePermission.module_id == module.id
            )
        ).scalar_one_or_none()
        if grant is None:
            grant = RolePermission(role_id=role.id, module_id=module.id)
            db.add(grant)
        grant.can_read = grant.can_create = grant.can_update = grant.can_delete = True
    return role


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a control-panel admin (no registration UI).")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--name", default="")
    parser.add_argument("--surname", default="")
    parser.add_argument("--role", help="Role name; created if it does not exist")
    parser.add_argument(
        "--module",
        action="append",
        default=[],
        help="Module to grant full CRUD on (repeatable; requires --role)",
    )
    args = parser.parse_args()

    email = args.email.strip().lower()
    if not email or len(email) > 255 or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if args.module and not args.role:
        print("--module requires --role.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.execute(
            select(Admin).where(func.lower(Admin.email) == email)
        ).scalar_one_or_none()
        if existing:
            print(f"Admin '{email}' already exists.", file=sys.stderr)
            return 1
        role = _get_or_create_role(db, args.role.strip(), args.module) if args.role else None
        admin = Admin(
            email=email,
            password_hash=hash_password(args.password),
            name=args.name,
            surname=args.surname,
            role_id=role.id if role is not None else None,
        )
        db.add(admin)
        db.commit()
        role_note = f" with role '{role.role_name}'" if role is not None else ""
        print(f"Created admin '{email}'{role_note}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
