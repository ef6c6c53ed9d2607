"""Health check: database reachability and role catalog completeness. No auth."""

from fastapi import APIRouter

from roster.api.v1.auth import DbDep
from roster.core.config import settings
from roster.core.database import check_db_connected
from roster.models import Role
from roster.schemas.health import HealthResponse
from roster.services.role_catalog import ROLE_DEFINITIONS

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: DbDep) -> HealthResponse:
    """
    Used by load balancers and monitoring. An incomplete catalog means the
    catalog revision or the role migration has not been run yet.
    """
    if not check_db_connected(db):
        return HealthResponse(environment=settings.APP_ENV, database="disconnected")

    present = {name for (name,) in db.query(Role.role_name).all()}
    missing = [d.role_name for d in ROLE_DEFINITIONS if d.role_name not in present]
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected",
        role_catalog="incomplete" if missing else "complete",
        missing_roles=missing,
    )
