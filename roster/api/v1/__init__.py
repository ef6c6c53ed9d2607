"""API v1 routes."""

from fastapi import APIRouter

from roster.api.v1 import auth, health, migrations, personnel, qualifications, roles, schools, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(personnel.router, prefix="/personnel", tags=["personnel"])
router.include_router(schools.router, prefix="/schools", tags=["schools"])
router.include_router(qualifications.router, prefix="/qualifications", tags=["qualifications"])
router.include_router(migrations.router, prefix="/migrations", tags=["migrations"])
