"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admins, auth, health, roles, suppliers, users
from app.schemas.auth import AccountKind

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.build_router(AccountKind.ADMIN), prefix="/auth", tags=["auth"])
router.include_router(
    auth.build_router(AccountKind.SUPPLIER), prefix="/supplier/auth", tags=["supplier-auth"]
)
router.include_router(
    auth.build_router(AccountKind.MOBILE_USER), prefix="/mobile/auth", tags=["mobile-auth"]
)
router.include_router(admins.router, prefix="/admins", tags=["admins"])
router.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
