"""Operator-triggered migration shims (super admin only)."""

import logging

from fastapi import APIRouter

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.core.config import get_settings
from roster.schemas.migration import MergeVerification, MigrationResult
from roster.services.authorization import require_role
from roster.services.migrations import merge_identities, migrate_role_strings, verify_identity_merge
from roster.services.role_catalog import SUPER_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/roles", response_model=MigrationResult)
def run_role_migration(identity_ref: IdentityRefDep, db: DbDep, dry_run: bool = False) -> MigrationResult:
    """Rewrite string-typed role assignments to role catalog ids."""
    operator = require_role(db, identity_ref, SUPER_ADMIN)
    logger.info("Role migration requested: operator_id=%s dry_run=%s", operator.id, dry_run)
    return migrate_role_strings(db, dry_run=dry_run)


@router.post("/identities", response_model=MigrationResult)
def run_identity_merge(identity_ref: IdentityRefDep, db: DbDep, dry_run: bool = False) -> MigrationResult:
    """Fold legacy system_users into personnel and remap references."""
    operator = require_role(db, identity_ref, SUPER_ADMIN)
    logger.info("Identity merge requested: operator_id=%s dry_run=%s", operator.id, dry_run)
    return merge_identities(
        db,
        dry_run=dry_run,
        default_rank_abbreviation=get_settings().DEFAULT_RANK_ABBREVIATION,
    )


@router.get("/verify", response_model=MergeVerification)
def verify(identity_ref: IdentityRefDep, db: DbDep) -> MergeVerification:
    require_role(db, identity_ref, SUPER_ADMIN)
    return verify_identity_merge(db)
