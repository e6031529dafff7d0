"""Endpoint tests for account administration and role management."""

import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select

from app.models import RefreshToken
from app.schemas.auth import AccountKind
from factories import (
    PASSWORD,
    ApiTestCase,
    bearer,
    create_admin,
    create_mobile_user,
    create_role,
    create_supplier,
)

FULL_GRANTS = {
    "administration": "cru",
    "suppliers": "ru",
    "users": "ru",
    "roles & permissions": "ru",
}


class AdminApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.super_role = create_role(self.db, "Super Admin", grants=FULL_GRANTS)
        self.operator = create_admin(self.db, "ops@x.com", role=self.super_role)
        self.headers = bearer(AccountKind.ADMIN, self.operator.id, "ops@x.com")

    def login(self, path: str, email: str, password: str = PASSWORD):
        return self.client.post(path, json={"email": email, "password": password})

    def session_count(self, kind: AccountKind, account_id: int) -> int:
        self.db.expire_all()
        return self.db.execute(
            select(func.count())
            .select_from(RefreshToken)
            .where(RefreshToken.account_kind == kind.value, RefreshToken.account_id == account_id)
        ).scalar_one()


class TestAdminPatch(AdminApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.target = create_admin(self.db, "target@x.com")

    def test_requires_permission(self) -> None:
        reader = create_role(self.db, "Reader", grants={"administration": "r"})
        weak = create_admin(self.db, "weak@x.com", role=reader)
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}",
            json={"name": "X"},
            headers=bearer(AccountKind.ADMIN, weak.id, weak.email),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "You do not have permission to update administration.")

    def test_requires_bearer(self) -> None:
        resp = self.client.patch(f"/api/v1/admins/{self.target.id}", json={"name": "X"})
        self.assertEqual(resp.status_code, 401)

    def test_only_present_fields_are_written(self) -> None:
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"name": "Grace"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        target = self.reload(self.target)
        self.assertEqual(target.name, "Grace")
        self.assertEqual(target.surname, "Admin")
        self.assertTrue(target.is_active)

    def test_empty_patch_and_null_name_are_400(self) -> None:
        resp = self.client.patch(f"/api/v1/admins/{self.target.id}", json={}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "No fields to update.")
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"name": None}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 400)

    def test_email_conflict_is_409(self) -> None:
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"email": "OPS@x.com"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 409)

    def test_email_is_stored_lowercase(self) -> None:
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"email": " New.Admin@X.com "}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["email"], "new.admin@x.com")
        self.assertEqual(self.login("/api/v1/auth/login", "NEW.ADMIN@x.com").status_code, 200)

    def test_unknown_role_and_unknown_admin_are_404(self) -> None:
        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"role_id": 999}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Role not found.")
        resp = self.client.patch("/api/v1/admins/999", json={"name": "X"}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Admin not found.")

    def test_deactivation_revokes_sessions(self) -> None:
        self.assertEqual(self.login("/api/v1/auth/login", "target@x.com").status_code, 200)
        self.assertEqual(self.session_count(AccountKind.ADMIN, self.target.id), 1)

        resp = self.client.patch(
            f"/api/v1/admins/{self.target.id}", json={"is_active": False}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["data"]["is_active"])
        self.assertEqual(self.session_count(AccountKind.ADMIN, self.target.id), 0)
        self.assertEqual(self.client.post("/api/v1/auth/refresh").status_code, 401)
        self.assertEqual(self.login("/api/v1/auth/login", "target@x.com").status_code, 403)


class TestUnlockAndPasswordReset(AdminApiTestCase):
    def _lock(self, account) -> None:
        row = self.reload(account)
        row.failed_attempts = 5
        row.locked_until = datetime.now(UTC) + timedelta(minutes=20)
        row.lockout_stage = 1
        self.db.commit()

    def test_unlock_admin(self) -> None:
        target = create_admin(self.db, "locked@x.com")
        self._lock(target)
        self.assertEqual(self.login("/api/v1/auth/login", "locked@x.com").status_code, 423)

        resp = self.client.post(f"/api/v1/admins/{target.id}/unlock", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["failed_attempts"], 0)
        self.assertIsNone(data["locked_until"])
        self.assertEqual(data["lockout_stage"], 0)
        self.assertEqual(self.login("/api/v1/auth/login", "locked@x.com").status_code, 200)

    def test_unlock_missing_admin(self) -> None:
        resp = self.client.post("/api/v1/admins/999/unlock", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_password_reset_unlocks_and_ends_sessions(self) -> None:
        target = create_admin(self.db, "reset@x.com")
        self.assertEqual(self.login("/api/v1/auth/login", "reset@x.com").status_code, 200)
        self._lock(target)

        resp = self.client.post(
            f"/api/v1/admins/{target.id}/password-reset",
            json={"password": "brand-new-pass", "password_confirmation": "brand-new-pass"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.session_count(AccountKind.ADMIN, target.id), 0)
        self.assertEqual(self.login("/api/v1/auth/login", "reset@x.com").status_code, 401)
        self.assertEqual(
            self.login("/api/v1/auth/login", "reset@x.com", "brand-new-pass").status_code, 200
        )

    def test_password_reset_validation(self) -> None:
        target = create_admin(self.db, "reset@x.com")
        url = f"/api/v1/admins/{target.id}/password-reset"
        resp = self.client.post(
            url, json={"password": "brand-new-pass", "password_confirmation": "other-pass"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Password confirmation does not match.")
        resp = self.client.post(
            url, json={"password": "short", "password_confirmation": "short"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 400)

    def test_supplier_unlock_and_reset(self) -> None:
        supplier = create_supplier(self.db, "s@x.com")
        self._lock(supplier)
        resp = self.client.post(f"/api/v1/suppliers/{supplier.id}/unlock", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.login("/api/v1/supplier/auth/login", "s@x.com").status_code, 200)

        resp = self.client.post(
            f"/api/v1/suppliers/{supplier.id}/password-reset",
            json={"password": "supplier-pass-2", "password_confirmation": "supplier-pass-2"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            self.login("/api/v1/supplier/auth/login", "s@x.com", "supplier-pass-2").status_code, 200
        )

    def test_mobile_user_permanent_lock_is_cleared_by_unlock(self) -> None:
        user = create_mobile_user(self.db, "m@x.com")
        row = self.reload(user)
        row.failed_attempts = 3
        row.lockout_stage = 3
        self.db.commit()
        resp = self.login("/api/v1/mobile/auth/login", "m@x.com")
        self.assertEqual(resp.status_code, 423)
        self.assertIn("permanently locked", resp.json()["message"])
        self.assertNotIn("remaining_minutes", resp.json())

        resp = self.client.post(f"/api/v1/users/{user.id}/unlock", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.login("/api/v1/mobile/auth/login", "m@x.com").status_code, 200)

    def test_supplier_token_cannot_use_admin_routes(self) -> None:
        supplier = create_supplier(self.db, "s@x.com", role=self.super_role)
        resp = self.client.post(
            f"/api/v1/suppliers/{supplier.id}/unlock",
            headers=bearer(AccountKind.SUPPLIER, supplier.id, supplier.email),
        )
        self.assertEqual(resp.status_code, 401)


class TestAccountStatus(AdminApiTestCase):
    def test_deactivating_user_revokes_sessions(self) -> None:
        user = create_mobile_user(self.db, "m@x.com")
        self.assertEqual(self.login("/api/v1/mobile/auth/login", "m@x.com").status_code, 200)
        self.assertEqual(self.session_count(AccountKind.MOBILE_USER, user.id), 1)

        resp = self.client.put(
            f"/api/v1/users/{user.id}/status", json={"is_active": False}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "User status updated successfully.")
        self.assertFalse(resp.json()["data"]["is_active"])
        self.assertEqual(self.session_count(AccountKind.MOBILE_USER, user.id), 0)
        self.assertEqual(self.client.post("/api/v1/mobile/auth/refresh").status_code, 401)
        self.assertEqual(self.login("/api/v1/mobile/auth/login", "m@x.com").status_code, 403)

        resp = self.client.put(
            f"/api/v1/users/{user.id}/status", json={"is_active": True}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.login("/api/v1/mobile/auth/login", "m@x.com").status_code, 200)

    def test_deactivating_supplier_revokes_sessions(self) -> None:
        supplier = create_supplier(self.db, "s@x.com")
        self.assertEqual(self.login("/api/v1/supplier/auth/login", "s@x.com").status_code, 200)

        resp = self.client.put(
            f"/api/v1/suppliers/{supplier.id}/status", json={"is_active": False}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Supplier status updated successfully.")
        self.assertEqual(self.session_count(AccountKind.SUPPLIER, supplier.id), 0)
        self.assertFalse(self.reload(supplier).is_active)

    def test_activation_keeps_sessions(self) -> None:
        user = create_mobile_user(self.db, "m@x.com")
        self.login("/api/v1/mobile/auth/login", "m@x.com")
        resp = self.client.put(
            f"/api/v1/users/{user.id}/status", json={"is_active": True}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.session_count(AccountKind.MOBILE_USER, user.id), 1)

    def test_status_validation_and_missing_accounts(self) -> None:
        resp = self.client.put("/api/v1/users/999/status", json={"is_active": False}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "User not found.")
        resp = self.client.put("/api/v1/suppliers/999/status", json={}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Field 'is_active' is required.")

    def test_status_requires_update_permission(self) -> None:
        reader = create_role(self.db, "Reader", grants={"users": "r"})
        weak = create_admin(self.db, "weak@x.com", role=reader)
        user = create_mobile_user(self.db, "m@x.com")
        resp = self.client.put(
            f"/api/v1/users/{user.id}/status",
            json={"is_active": False},
            headers=bearer(AccountKind.ADMIN, weak.id, weak.email),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(self.reload(user).is_active)



class TestOwnPasswordChange(AdminApiTestCase):
    URL = "/api/v1/admins/me/password"

    def test_change_password(self) -> None:
        resp = self.client.put(
            self.URL,
            json={
                "current_password": PASSWORD,
                "new_password": "another-secret-1",
                "confirm_password": "another-secret-1",
            },
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Password changed successfully.")
        self.assertEqual(self.login("/api/v1/auth/login", "ops@x.com").status_code, 401)
        self.assertEqual(
            self.login("/api/v1/auth/login", "ops@x.com", "another-secret-1").status_code, 200
        )

    def test_wrong_current_password(self) -> None:
        resp = self.client.put(
            self.URL,
            json={
                "current_password": "not-it-at-all",
                "new_password": "another-secret-1",
                "confirm_password": "another-secret-1",
            },
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Current password is incorrect.")

    def test_same_password_rejected(self) -> None:
        resp = self.client.put(
            self.URL,
            json={"current_password": PASSWORD, "new_password": PASSWORD, "confirm_password": PASSWORD},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)


class TestRoleEndpoints(AdminApiTestCase):
    def test_blocking_role_revokes_sessions_and_denies_permissions(self) -> None:
        field_role = create_role(self.db, "Field", grants={"suppliers": "r"})
        member = create_admin(self.db, "member@x.com", role=field_role)
        supplier = create_supplier(self.db, "s@x.com", role=field_role)
        self.assertEqual(self.login("/api/v1/auth/login", "member@x.com").status_code, 200)
        self.assertEqual(self.login("/api/v1/supplier/auth/login", "s@x.com").status_code, 200)

        resp = self.client.put(
            f"/api/v1/roles/{field_role.id}/status", json={"status": 0}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["previous_status"], 1)
        self.assertEqual(data["role"]["status"], 0)
        self.assertEqual(data["sessions_revoked"], 2)
        self.assertEqual(self.session_count(AccountKind.ADMIN, member.id), 0)
        self.assertEqual(self.session_count(AccountKind.SUPPLIER, supplier.id), 0)

        self.assertEqual(self.login("/api/v1/auth/login", "member@x.com").status_code, 403)
        resp = self.client.post(
            f"/api/v1/suppliers/{supplier.id}/unlock",
            headers=bearer(AccountKind.ADMIN, member.id, member.email),
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.put(
            f"/api/v1/roles/{field_role.id}/status", json={"status": 1}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["sessions_revoked"], 0)
        self.assertEqual(self.login("/api/v1/auth/login", "member@x.com").status_code, 200)

    def test_operator_with_blocked_role_is_denied_immediately(self) -> None:
        role = self.reload(self.super_role)
        role.status = 0
        self.db.commit()
        resp = self.client.get(f"/api/v1/roles/{role.id}/permissions", headers=self.headers)
        self.assertEqual(resp.status_code, 403)

    def test_permission_matrix(self) -> None:
        resp = self.client.get(f"/api/v1/roles/{self.super_role.id}/permissions", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["role"]["role_name"], "Super Admin")
        names = [p["module_name"] for p in data["permissions"]]
        self.assertEqual(names, sorted(names))
        self.assertEqual(len(names), 4)

    def test_unknown_role_is_404(self) -> None:
        resp = self.client.put("/api/v1/roles/999/status", json={"status": 0}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        resp = self.client.get("/api/v1/roles/999/permissions", headers=self.headers)
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
