"""Initial auth tables: roles, modules, grants, accounts, supplier applications,
refresh tokens, login logs.

Revision ID: 20261017000000
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261017000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACCOUNT_TABLES = ("admins", "suppliers", "mobile_users")
EMAIL_TABLES = ACCOUNT_TABLES + ("supplier_applications",)


def _account_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("failed_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("lockout_stage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _role_fk() -> sa.Column:
    return sa.Column(
        "role_id",
        sa.Integer(),
        sa.ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("role_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role_name"),
    )
    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("module_name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("module_name"),
    )
    op.create_table(
        "role_module_permissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "role_id",
            sa.Integer(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("can_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_create", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_update", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role_id", "module_id", name="uq_role_module"),
    )
    op.create_index(
        op.f("ix_role_module_permissions_role_id"),
        "role_module_permissions",
        ["role_id"],
        unique=False,
    )

    op.create_table(
        "admins",
        *_account_columns(),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("surname", sa.String(length=255), nullable=False, server_default=""),
        _role_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "suppliers",
        *_account_columns(),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("cellphone", sa.String(length=64), nullable=True),
        sa.Column("telephone", sa.String(length=64), nullable=True),
        _role_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "mobile_users",
        *_account_columns(),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("surname", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("cell", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "supplier_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("cell", sa.String(length=64), nullable=True),
        sa.Column("telephone", sa.String(length=64), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("reg", sa.String(length=64), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    for table in EMAIL_TABLES:
        op.create_index(f"uq_{table}_email_lower", table, [sa.text("lower(email)")], unique=True)
    for table in ("admins", "suppliers"):
        op.create_index(op.f(f"ix_{table}_role_id"), table, ["role_id"], unique=False)

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_kind", sa.String(length=32), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_refresh_tokens_token"), "refresh_tokens", ["token"], unique=True)
    op.create_index(
        op.f("ix_refresh_tokens_expires_at"), "refresh_tokens", ["expires_at"], unique=False
    )
    op.create_index(
        "ix_refresh_tokens_account",
        "refresh_tokens",
        ["account_kind", "account_id"],
        unique=False,
    )

    op.create_table(
        "login_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_kind", sa.String(length=32), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("failure_reason", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_login_logs_account_id"), "login_logs", ["account_id"], unique=False)
    op.create_index(op.f("ix_login_logs_email"), "login_logs", ["email"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_login_logs_email"), table_name="login_logs")
    op.drop_index(op.f("ix_login_logs_account_id"), table_name="login_logs")
    op.drop_table("login_logs")
    op.drop_index("ix_refresh_tokens_account", table_name="refresh_tokens")
    op.drop_index(op.f("ix_refresh_tokens_expires_at"), table_name="refresh_tokens")
    op.drop_index(op.f("ix_refresh_tokens_token"), table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    for table in ("admins", "suppliers"):
        op.drop_index(op.f(f"ix_{table}_role_id"), table_name=table)
    for table in EMAIL_TABLES:
        op.drop_index(f"uq_{table}_email_lower", table_name=table)
        op.drop_table(table)
    op.drop_index(op.f("ix_role_module_permissions_role_id"), table_name="role_module_permissions")
    op.drop_table("role_module_permissions")
    op.drop_table("modules")
    op.drop_table("roles")
