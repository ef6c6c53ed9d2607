"""Unit tests for roster.services.system_access: granting, revoking and disabling logins; archival."""

import unittest
from datetime import UTC, datetime

from roster.core.exceptions import (
    ConflictError,
    InsufficientRoleError,
    InvalidInputError,
    ResourceNotFoundError,
)
from roster.core.security import validate_password_strength, verify_password
from roster.models import InstructorSchool, Personnel, PersonnelQualification, RoleAssignment
from roster.services.authorization import resolve_role_names
from roster.services.role_catalog import ADMINISTRATOR, INSTRUCTOR, MEMBER, SUPER_ADMIN
from roster.services.system_access import (
    change_password,
    create_personnel,
    default_rank,
    delete_personnel,
    generate_temporary_password,
    grant_system_access,
    list_users,
    list_users_with_roles,
    reset_user_password,
    revoke_system_access,
    set_account_active,
    toggle_account_active,
)
from tests.support import (
    PASSWORD,
    add_personnel,
    add_qualification,
    add_rank,
    add_school,
    assign_school,
    make_session,
    ref,
)


class TestCreateAndList(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])

    def test_create_personnel_without_login_at_lowest_rank(self) -> None:
        add_rank(self.session, "Corporal", "CPL", order=2)
        private = add_rank(self.session, "Private", "PTE", order=0)
        person = create_personnel(self.session, ref(self.admin), "  Rookie ")
        self.assertEqual(person.call_sign, "Rookie")
        self.assertEqual(person.rank_id, private.id)
        self.assertFalse(person.has_system_access)

    def test_duplicate_call_sign(self) -> None:
        with self.assertRaises(ConflictError):
            create_personnel(self.session, ref(self.admin), "Boss")

    def test_default_rank_falls_back_to_abbreviation(self) -> None:
        pte = add_rank(self.session, "Private", "PTE", order=None)
        self.assertEqual(default_rank(self.session, "PTE").id, pte.id)

    def test_list_users_only_logins_and_role_filter(self) -> None:
        add_personnel(self.session, "Ghost", login=False)
        add_personnel(self.session, "Sarge", roles=[INSTRUCTOR])
        names = [p.call_sign for p in list_users(self.session, ref(self.root))]
        self.assertEqual(names, ["Boss", "Root", "Sarge"])
        names = [p.call_sign for p in list_users(self.session, ref(self.root), role=INSTRUCTOR)]
        self.assertEqual(names, ["Sarge"])
        self.assertEqual(list_users(self.session, ref(self.root), role="quartermaster"), [])

    def test_list_users_requires_super_admin(self) -> None:
        with self.assertRaises(InsufficientRoleError):
            list_users(self.session, ref(self.admin))

    def test_list_users_with_roles(self) -> None:
        listed = {u.personnel.call_sign: u.roles for u in list_users_with_roles(self.session, ref(self.admin))}
        self.assertEqual(listed, {"Root": [SUPER_ADMIN], "Boss": [ADMINISTRATOR]})


class TestGrantAndRevoke(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])
        self.recruit = add_personnel(self.session, "Rookie", login=False)

    def test_grant_writes_complete_login_group(self) -> None:
        person = grant_system_access(self.session, ref(self.admin), self.recruit.id, "Secret123", [MEMBER])
        self.assertTrue(verify_password("Secret123", person.password_hash))
        self.assertIsNotNone(person.password_salt)
        self.assertTrue(person.is_active)
        self.assertTrue(person.require_password_change)
        self.assertIsNotNone(person.last_password_change)
        self.assertEqual(resolve_role_names(self.session, person.id), [MEMBER])

    def test_weak_password_is_rejected(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            grant_system_access(self.session, ref(self.admin), self.recruit.id, "alllowercase", [MEMBER])
        self.assertIn("uppercase", ctx.exception.message)
        self.session.refresh(self.recruit)
        self.assertFalse(self.recruit.has_system_access)

    def test_grant_refuses_identity_that_already_logs_in(self) -> None:
        original_hash = self.root.password_hash
        with self.assertRaises(ConflictError):
            grant_system_access(self.session, ref(self.admin), self.root.id, "NewPass123", [MEMBER])
        self.session.refresh(self.root)
        self.assertEqual(self.root.password_hash, original_hash)
        self.assertEqual(resolve_role_names(self.session, self.root.id), [SUPER_ADMIN])

    def test_admin_cannot_grant_super_admin(self) -> None:
        with self.assertRaises(InsufficientRoleError):
            grant_system_access(self.session, ref(self.admin), self.recruit.id, "Secret123", [SUPER_ADMIN])
        self.session.refresh(self.recruit)
        self.assertFalse(self.recruit.has_system_access)

    def test_revoke_keeps_roster_record(self) -> None:
        school = add_school(self.session)
        qualification = add_qualification(self.session, school)
        grant_system_access(self.session, ref(self.admin), self.recruit.id, "Secret123", [INSTRUCTOR])
        assign_school(self.session, self.recruit, school)
        self.session.add(
            PersonnelQualification(
                personnel_id=self.recruit.id,
                qualification_id=qualification.id,
                awarded_date=datetime.now(UTC),
            )
        )
        self.session.commit()

        person = revoke_system_access(self.session, ref(self.root), self.recruit.id)
        self.assertFalse(person.has_system_access)
        self.assertIsNone(person.is_active)
        self.assertIsNone(person.password_salt)
        self.assertEqual(resolve_role_names(self.session, person.id), [])
        self.assertEqual(self.session.query(InstructorSchool).count(), 0)
        self.assertEqual(self.session.query(PersonnelQualification).count(), 1)
        self.assertIsNotNone(self.session.get(Personnel, self.recruit.id))

    def test_revoke_refuses_super_admin(self) -> None:
        other_root = add_personnel(self.session, "Root2", roles=[SUPER_ADMIN])
        with self.assertRaises(ConflictError):
            revoke_system_access(self.session, ref(self.root), other_root.id)

    def test_revoke_requires_super_admin(self) -> None:
        with self.assertRaises(InsufficientRoleError):
            revoke_system_access(self.session, ref(self.admin), self.recruit.id)


class TestAccountActive(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        self.member = add_personnel(self.session, "Hawk", roles=[MEMBER])

    def test_toggle_twice(self) -> None:
        self.assertFalse(toggle_account_active(self.session, ref(self.root), self.member.id).is_active)
        self.assertTrue(toggle_account_active(self.session, ref(self.root), self.member.id).is_active)

    def test_cannot_deactivate_super_admin(self) -> None:
        with self.assertRaises(ConflictError):
            set_account_active(self.session, ref(self.root), self.root.id, False)

    def test_roster_record_without_login(self) -> None:
        ghost = add_personnel(self.session, "Ghost", login=False)
        with self.assertRaises(ConflictError):
            set_account_active(self.session, ref(self.root), ghost.id, True)


class TestDeletePersonnel(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])

    def test_removes_record_and_attachments(self) -> None:
        target = add_personnel(self.session, "Sarge", roles=[INSTRUCTOR])
        assign_school(self.session, target, add_school(self.session))
        delete_personnel(self.session, ref(self.admin), target.id)
        self.assertIsNone(self.session.get(Personnel, target.id))
        self.assertEqual(
            self.session.query(RoleAssignment).filter(RoleAssignment.personnel_id == target.id).count(), 0
        )
        self.assertEqual(self.session.query(InstructorSchool).count(), 0)

    def test_refuses_self_and_super_admin(self) -> None:
        root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        with self.assertRaises(ConflictError):
            delete_personnel(self.session, ref(self.admin), self.admin.id)
        with self.assertRaises(ConflictError):
            delete_personnel(self.session, ref(self.admin), root.id)

    def test_missing_target(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            delete_personnel(self.session, ref(self.admin), 9999)


class TestPasswordManagement(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])
        self.member = add_personnel(self.session, "Hawk", roles=[MEMBER])

    def test_change_password_clears_the_flag(self) -> None:
        self.member.require_password_change = True
        self.session.commit()
        person = change_password(self.session, ref(self.member), PASSWORD, "Fresh1234")
        self.assertTrue(verify_password("Fresh1234", person.password_hash))
        self.assertFalse(verify_password(PASSWORD, person.password_hash))
        self.assertFalse(person.require_password_change)
        self.assertTrue(person.has_system_access)

    def test_change_password_needs_the_current_one(self) -> None:
        with self.assertRaises(InvalidInputError):
            change_password(self.session, ref(self.member), "Wrong1234", "Fresh1234")
        self.session.refresh(self.member)
        self.assertTrue(verify_password(PASSWORD, self.member.password_hash))

    def test_change_password_checks_strength(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            change_password(self.session, ref(self.member), PASSWORD, "nodigitshere")
        self.assertIn("number", ctx.exception.message)

    def test_super_admin_resets_password(self) -> None:
        temporary = reset_user_password(self.session, ref(self.root), self.member.id)
        self.assertEqual(validate_password_strength(temporary), [])
        self.session.refresh(self.member)
        self.assertTrue(verify_password(temporary, self.member.password_hash))
        self.assertTrue(self.member.require_password_change)

    def test_reset_is_super_admin_only(self) -> None:
        with self.assertRaises(InsufficientRoleError):
            reset_user_password(self.session, ref(self.admin), self.root.id)
        self.session.refresh(self.root)
        self.assertTrue(verify_password(PASSWORD, self.root.password_hash))

    def test_reset_needs_system_access(self) -> None:
        ghost = add_personnel(self.session, "Ghost", login=False)
        with self.assertRaises(ConflictError):
            reset_user_password(self.session, ref(self.root), ghost.id)

    def test_temporary_passwords_pass_strength_rules(self) -> None:
        for _ in range(20):
            self.assertEqual(validate_password_strength(generate_temporary_password()), [])
