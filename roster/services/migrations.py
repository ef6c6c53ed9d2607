"""
One-shot migration shims from the legacy schema shapes to the current ones.

migrate_role_strings: user_roles rows that still carry the old string ``role``
become rows referencing the role catalog by id.

merge_identities: the standalone system_users login table is folded into
personnel, then every foreign key into the old id-space is rewritten through
the resulting old-id -> personnel-id map. The remap must finish in one pass;
a partial run leaves references split across both id-spaces.

Both are idempotent when re-run sequentially. Neither is safe to run twice at
the same time against the same tables. Per-row problems are logged and the row
is dropped; only whole-run failures raise.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from roster.core.exceptions import MigrationInconsistency
from roster.models import (
    Event,
    EventInstructor,
    InstructorSchool,
    Personnel,
    PersonnelQualification,
    RankHistory,
    Role,
    RoleAssignment,
    SystemUser,
)
from roster.schemas.migration import MergeVerification, MigrationResult
from roster.services.role_catalog import ensure_role_catalog
from roster.services.system_access import default_rank

logger = logging.getLogger(__name__)

NO_MIGRATION_NEEDED = "No migration needed"


class _RunLog:
    """Collects progress lines for the result while also sending them to the logger."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def info(self, msg: str, *args: object) -> None:
        line = msg % args if args else msg
        self.lines.append(line)
        logger.info(line)

    def inconsistency(self, msg: str, *args: object) -> None:
        err = MigrationInconsistency(msg % args if args else msg)
        self.lines.append(str(err))
        logger.warning("%s", err)


def _finish(session: Session, dry_run: bool) -> None:
    if dry_run:
        session.rollback()
    else:
        session.commit()


def _owner_key(row: RoleAssignment) -> tuple[str, int] | None:
    if row.personnel_id is not None:
        return ("personnel", row.personnel_id)
    if row.user_id is not None:
        return ("user", row.user_id)
    return None


def migrate_role_strings(session: Session, dry_run: bool = False) -> MigrationResult:
    """
    Rewrite string-typed role assignments to catalog ids.

    Seeds missing catalog roles first. A legacy row is replaced by a fresh row
    with role_id set unless its owner already holds that role. Rows with no role
    information, no owner, or an unknown role string are deleted.
    """
    run = _RunLog()
    stats = {"migrated": 0, "skipped": 0, "deleted": 0}
    try:
        seeded = ensure_role_catalog(session)
        if seeded:
            run.info("Seeded %s missing role catalog entries", seeded)
        role_ids = {name: rid for rid, name in session.query(Role.id, Role.role_name).all()}

        rows = session.query(RoleAssignment).order_by(RoleAssignment.id).all()
        held: set[tuple[tuple[str, int], int]] = set()
        for row in rows:
            owner = _owner_key(row)
            if row.role_id is not None and owner is not None:
                held.add((owner, row.role_id))

        for row in rows:
            owner = _owner_key(row)
            if row.role_id is not None:
                if row.role is not None or row.color is not None:
                    row.role = None
                    row.color = None
                    stats["migrated"] += 1
                    run.info("user_roles %s: cleared leftover legacy role fields", row.id)
                else:
                    stats["skipped"] += 1
                continue

            if row.role is None or owner is None:
                run.inconsistency(
                    "user_roles %s has no role or no owner; deleting", row.id
                )
                session.delete(row)
                stats["deleted"] += 1
                continue

            role_name = row.role.strip().lower()
            role_id = role_ids.get(role_name)
            if role_id is None:
                run.inconsistency(
                    "user_roles %s has unknown role %r; deleting", row.id, row.role
                )
                session.delete(row)
                stats["deleted"] += 1
                continue

            session.delete(row)
            if (owner, role_id) in held:
                stats["skipped"] += 1
                run.info(
                    "user_roles %s: %s %s already holds %s; legacy row dropped",
                    row.id,
                    owner[0],
                    owner[1],
                    role_name,
                )
                continue
            session.add(
                RoleAssignment(personnel_id=row.personnel_id, user_id=row.user_id, role_id=role_id)
            )
            held.add((owner, role_id))
            stats["migrated"] += 1
            run.info("user_roles %s: %s -> role_id %s", row.id, role_name, role_id)

        session.flush()
        _finish(session, dry_run)
    except Exception:
        session.rollback()
        raise

    message = (
        f"Role migration {'dry run ' if dry_run else ''}complete: "
        f"migrated={stats['migrated']} skipped={stats['skipped']} deleted={stats['deleted']}"
    )
    run.info(message)
    return MigrationResult(success=True, message=message, log=run.lines, stats=stats, dry_run=dry_run)


def _index_ignoring_case(people: list[Personnel], attr: str, run: _RunLog) -> dict[str, Personnel | None]:
    """Lower-cased attr -> personnel. None marks a key shared by several roster records."""
    index: dict[str, Personnel | None] = {}
    for person in people:
        value = getattr(person, attr)
        if not value:
            continue
        key = value.strip().lower()
        if key in index:
            run.inconsistency(
                "personnel %s: %s %r matches another roster record ignoring case; "
                "not used for case-insensitive matching",
                person.id,
                attr,
                value,
            )
            index[key] = None
        else:
            index[key] = person
    return index


def _copy_login_fields(user: SystemUser, person: Personnel, run: _RunLog) -> None:
    if user.password_hash is None:
        run.info("System user %s has no password; no login fields copied", user.name)
        return
    person.password_hash = user.password_hash
    # bcrypt hashes embed their salt in the first 29 characters
    person.password_salt = user.password_salt or user.password_hash[:29]
    person.is_active = bool(user.is_active)
    person.require_password_change = bool(user.require_password_change)
    person.last_password_change = user.last_password_change or datetime.now(UTC)


def _remap_owner_rows(
    session: Session,
    model: type,
    id_map: dict[int, int],
    unique_with: str | None,
    run: _RunLog,
) -> tuple[int, int]:
    """
    Move user_id references onto personnel_id for a junction table.

    unique_with names the column that, with personnel_id, must stay unique.
    Returns (remapped, deleted).
    """
    table = model.__tablename__
    remapped = deleted = 0
    taken: set[tuple[int, int]] = set()
    if unique_with is not None:
        column = getattr(model, unique_with)
        taken = {
            (pid, other)
            for pid, other in session.query(model.personnel_id, column)
            .filter(model.personnel_id.is_not(None), column.is_not(None))
            .all()
        }

    for row in session.query(model).filter(model.user_id.is_not(None)).order_by(model.id).all():
        new_id = id_map.get(row.user_id)
        if row.personnel_id is not None:
            row.user_id = None
            remapped += 1
            continue
        if new_id is None:
            run.inconsistency(
                "%s %s references unknown system user %s; deleting", table, row.id, row.user_id
            )
            session.delete(row)
            deleted += 1
            continue
        other = getattr(row, unique_with) if unique_with is not None else None
        if other is not None and (new_id, other) in taken:
            run.info("%s %s duplicates an existing row for personnel %s; deleting", table, row.id, new_id)
            session.delete(row)
            deleted += 1
            continue
        row.personnel_id = new_id
        row.user_id = None
        if other is not None:
            taken.add((new_id, other))
        remapped += 1
    session.flush()
    return remapped, deleted


def _remap_actor_column(
    session: Session,
    model: type,
    legacy_column: str,
    new_column: str,
    id_map: dict[int, int],
    run: _RunLog,
) -> int:
    """Move a legacy actor reference (created_by, awarded_by, promoted_by) onto personnel ids."""
    legacy = getattr(model, legacy_column)
    count = 0
    for row in session.query(model).filter(legacy.is_not(None)).all():
        old_id = getattr(row, legacy_column)
        new_id = id_map.get(old_id)
        if new_id is None:
            run.inconsistency(
                "%s %s: %s=%s is not a known system user; cleared",
                model.__tablename__,
                row.id,
                legacy_column,
                old_id,
            )
        elif getattr(row, new_column) is None:
            setattr(row, new_column, new_id)
        setattr(row, legacy_column, None)
        count += 1
    session.flush()
    return count


def merge_identities(
    session: Session,
    dry_run: bool = False,
    default_rank_abbreviation: str = "PTE",
) -> MigrationResult:
    """
    Fold system_users into personnel and rewrite every reference to the old ids.

    A legacy user matches an existing roster record by exact call sign, then by
    call sign and then email ignoring case; login fields are copied onto the
    match. Roster records that collide ignoring case are reported and only match
    exactly. Unmatched users get a new roster record at the lowest rank. Merged legacy rows are
    deleted, so a second run reports "No migration needed".
    """
    run = _RunLog()
    if not inspect(session.connection()).has_table(SystemUser.__tablename__):
        run.info("Legacy table %s not present", SystemUser.__tablename__)
        return MigrationResult(success=True, message=NO_MIGRATION_NEEDED, log=run.lines, dry_run=dry_run)

    legacy_users = session.query(SystemUser).order_by(SystemUser.id).all()
    if not legacy_users:
        run.info("Legacy table %s is empty", SystemUser.__tablename__)
        return MigrationResult(success=True, message=NO_MIGRATION_NEEDED, log=run.lines, dry_run=dry_run)

    stats = {
        "legacy_users": len(legacy_users),
        "matched_by_call_sign": 0,
        "matched_by_email": 0,
        "created": 0,
        "already_had_login": 0,
    }
    try:
        people = session.query(Personnel).all()
        exact_call_sign = {p.call_sign: p for p in people}
        by_call_sign = _index_ignoring_case(people, "call_sign", run)
        by_email = _index_ignoring_case(people, "email", run)
        rank = default_rank(session, default_rank_abbreviation)

        id_map: dict[int, int] = {}
        for user in legacy_users:
            name = user.name.strip()
            person = exact_call_sign.get(name) or by_call_sign.get(name.lower())
            method = "call_sign"
            if person is None and user.email:
                person = by_email.get(user.email.strip().lower())
                method = "email"

            if person is None:
                person = Personnel(
                    call_sign=name,
                    email=user.email,
                    status="active",
                    join_date=datetime.now(UTC),
                    rank_id=rank.id if rank else None,
                )
                session.add(person)
                session.flush()
                exact_call_sign[name] = person
                by_call_sign.setdefault(name.lower(), person)
                if user.email:
                    by_email.setdefault(user.email.strip().lower(), person)
                stats["created"] += 1
                run.info("System user %s -> new personnel %s", user.id, person.id)
            else:
                stats[f"matched_by_{method}"] += 1
                if person.has_system_access:
                    stats["already_had_login"] += 1
                run.info(
                    "System user %s -> personnel %s (%s) by %s",
                    user.id,
                    person.id,
                    person.call_sign,
                    method,
                )
            _copy_login_fields(user, person, run)
            id_map[user.id] = person.id
        session.flush()

        for model, unique_with in (
            (RoleAssignment, "role_id"),
            (InstructorSchool, "school_id"),
            (EventInstructor, "event_id"),
        ):
            remapped, deleted = _remap_owner_rows(session, model, id_map, unique_with, run)
            stats[f"{model.__tablename__}_remapped"] = remapped
            stats[f"{model.__tablename__}_deleted"] = deleted
            run.info("%s: remapped=%s deleted=%s", model.__tablename__, remapped, deleted)

        for model, legacy_column, new_column in (
            (Event, "legacy_created_by", "created_by"),
            (PersonnelQualification, "legacy_awarded_by", "awarded_by"),
            (RankHistory, "legacy_promoted_by", "promoted_by"),
        ):
            count = _remap_actor_column(session, model, legacy_column, new_column, id_map, run)
            stats[f"{model.__tablename__}_remapped"] = count
            run.info("%s.%s: remapped=%s", model.__tablename__, new_column, count)

        for user in legacy_users:
            session.delete(user)
        session.flush()
        _finish(session, dry_run)
    except Exception:
        session.rollback()
        raise

    message = (
        f"{'Dry run: would merge' if dry_run else 'Merged'} {len(legacy_users)} legacy users "
        f"({stats['created']} new personnel)"
    )
    run.info(message)
    return MigrationResult(success=True, message=message, log=run.lines, stats=stats, dry_run=dry_run)


def verify_identity_merge(session: Session) -> MergeVerification:
    """Report leftovers of the dual-identity schema. Read only."""
    people = session.query(Personnel).all()
    with_roles = {
        pid
        for (pid,) in session.query(RoleAssignment.personnel_id)
        .filter(RoleAssignment.personnel_id.is_not(None))
        .distinct()
        .all()
    }
    legacy_references = {
        "user_roles": session.query(RoleAssignment).filter(RoleAssignment.user_id.is_not(None)).count(),
        "instructor_schools": session.query(InstructorSchool)
        .filter(InstructorSchool.user_id.is_not(None))
        .count(),
        "event_instructors": session.query(EventInstructor)
        .filter(EventInstructor.user_id.is_not(None))
        .count(),
        "events": session.query(Event).filter(Event.legacy_created_by.is_not(None)).count(),
        "personnel_qualifications": session.query(PersonnelQualification)
        .filter(PersonnelQualification.legacy_awarded_by.is_not(None))
        .count(),
        "rank_history": session.query(RankHistory)
        .filter(RankHistory.legacy_promoted_by.is_not(None))
        .count(),
    }
    remaining = 0
    if inspect(session.connection()).has_table(SystemUser.__tablename__):
        remaining = session.query(SystemUser).count()
    return MergeVerification(
        total_personnel=len(people),
        personnel_with_login=sum(1 for p in people if p.has_system_access),
        roles_without_login=sorted(
            p.call_sign for p in people if p.id in with_roles and not p.has_system_access
        ),
        legacy_references=legacy_references,
        legacy_users_remaining=remaining,
    )
