"""Unit tests for roster.services.role_assignments: full-replace role updates and instructor schools."""

import unittest

from roster.core.exceptions import (
    AlreadyAssignedError,
    AssignmentNotFoundError,
    ConflictError,
    InsufficientRoleError,
    NotAnInstructorError,
    ResourceNotFoundError,
)
from roster.models import InstructorSchool, Personnel, RoleAssignment
from roster.services.authorization import resolve_role_names
from roster.services.role_assignments import (
    assign_instructor_to_school,
    get_instructor_schools,
    get_user_roles,
    remove_instructor_from_school,
    update_user_roles,
)
from roster.services.role_catalog import (
    ADMINISTRATOR,
    GAME_MASTER,
    INSTRUCTOR,
    MEMBER,
    SUPER_ADMIN,
)
from roster.services.system_access import delete_personnel
from tests.support import add_personnel, add_school, make_session, ref, role_id


def _assignment_count(session, personnel_id: int) -> int:
    return session.query(RoleAssignment).filter(RoleAssignment.personnel_id == personnel_id).count()


class TestUpdateUserRoles(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])
        self.root = add_personnel(self.session, "Root", roles=[SUPER_ADMIN])
        self.target = add_personnel(self.session, "Hawk", roles=[MEMBER])

    def test_full_replace(self) -> None:
        roles = update_user_roles(self.session, ref(self.admin), self.target.id, [INSTRUCTOR, GAME_MASTER])
        self.assertEqual(roles, [INSTRUCTOR, GAME_MASTER])
        self.assertEqual(
            sorted(resolve_role_names(self.session, self.target.id)), [GAME_MASTER, INSTRUCTOR]
        )

    def test_repeating_the_same_update_is_idempotent(self) -> None:
        for _ in range(3):
            update_user_roles(self.session, ref(self.admin), self.target.id, [MEMBER, INSTRUCTOR])
        self.assertEqual(_assignment_count(self.session, self.target.id), 2)

    def test_duplicate_and_unknown_names_are_dropped(self) -> None:
        roles = update_user_roles(
            self.session, ref(self.admin), self.target.id, [MEMBER, "quartermaster", MEMBER]
        )
        self.assertEqual(roles, [MEMBER])
        self.assertEqual(_assignment_count(self.session, self.target.id), 1)

    def test_empty_set_removes_everything(self) -> None:
        self.assertEqual(update_user_roles(self.session, ref(self.admin), self.target.id, []), [])
        self.assertEqual(_assignment_count(self.session, self.target.id), 0)

    def test_requires_administrator(self) -> None:
        instructor = add_personnel(self.session, "Sarge", roles=[INSTRUCTOR])
        with self.assertRaises(InsufficientRoleError):
            update_user_roles(self.session, ref(instructor), self.target.id, [MEMBER])

    def test_only_super_admin_grants_super_admin(self) -> None:
        with self.assertRaises(InsufficientRoleError) as ctx:
            update_user_roles(self.session, ref(self.admin), self.target.id, [SUPER_ADMIN])
        self.assertEqual(ctx.exception.required_role, SUPER_ADMIN)
        self.assertEqual(resolve_role_names(self.session, self.target.id), [MEMBER])

        update_user_roles(self.session, ref(self.root), self.target.id, [SUPER_ADMIN])
        self.assertEqual(resolve_role_names(self.session, self.target.id), [SUPER_ADMIN])

    def test_administrator_cannot_strip_a_super_admin(self) -> None:
        with self.assertRaises(InsufficientRoleError) as ctx:
            update_user_roles(self.session, ref(self.admin), self.root.id, [])
        self.assertEqual(ctx.exception.required_role, SUPER_ADMIN)
        self.assertEqual(resolve_role_names(self.session, self.root.id), [SUPER_ADMIN])
        with self.assertRaises(ConflictError):
            delete_personnel(self.session, ref(self.admin), self.root.id)
        self.assertIsNotNone(self.session.get(Personnel, self.root.id))

    def test_super_admin_may_change_another_super_admin(self) -> None:
        other = add_personnel(self.session, "Root2", roles=[SUPER_ADMIN])
        update_user_roles(self.session, ref(self.root), other.id, [ADMINISTRATOR])
        self.assertEqual(resolve_role_names(self.session, other.id), [ADMINISTRATOR])

    def test_missing_target(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            update_user_roles(self.session, ref(self.admin), 9999, [MEMBER])

    def test_get_user_roles_skips_dangling_rows(self) -> None:
        self.session.add(RoleAssignment(personnel_id=self.target.id, role_id=424242))
        self.session.commit()
        roles = get_user_roles(self.session, ref(self.target), self.target.id)
        self.assertEqual([r.id for r in roles], [role_id(self.session, MEMBER)])


class TestInstructorSchools(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session()
        self.admin = add_personnel(self.session, "Boss", roles=[ADMINISTRATOR])
        self.instructor = add_personnel(self.session, "Sarge", roles=[INSTRUCTOR])
        self.school = add_school(self.session, "Infantry School", "INF")

    def test_assign_and_remove(self) -> None:
        assignment = assign_instructor_to_school(
            self.session, ref(self.admin), self.instructor.id, self.school.id
        )
        self.assertEqual(assignment.personnel_id, self.instructor.id)
        self.assertEqual(
            [s.id for s in get_instructor_schools(self.session, ref(self.instructor), self.instructor.id)],
            [self.school.id],
        )
        remove_instructor_from_school(self.session, ref(self.admin), self.instructor.id, self.school.id)
        self.assertEqual(self.session.query(InstructorSchool).count(), 0)

    def test_target_must_hold_instructor(self) -> None:
        gm = add_personnel(self.session, "GM", roles=[GAME_MASTER])
        with self.assertRaises(NotAnInstructorError):
            assign_instructor_to_school(self.session, ref(self.admin), gm.id, self.school.id)

    def test_administrator_target_is_not_an_instructor(self) -> None:
        other_admin = add_personnel(self.session, "Deputy", roles=[ADMINISTRATOR])
        with self.assertRaises(NotAnInstructorError):
            assign_instructor_to_school(self.session, ref(self.admin), other_admin.id, self.school.id)

    def test_missing_school(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            assign_instructor_to_school(self.session, ref(self.admin), self.instructor.id, 9999)

    def test_second_assignment_is_refused(self) -> None:
        assign_instructor_to_school(self.session, ref(self.admin), self.instructor.id, self.school.id)
        with self.assertRaises(AlreadyAssignedError):
            assign_instructor_to_school(self.session, ref(self.admin), self.instructor.id, self.school.id)
        self.assertEqual(self.session.query(InstructorSchool).count(), 1)

    def test_removing_missing_assignment(self) -> None:
        with self.assertRaises(AssignmentNotFoundError):
            remove_instructor_from_school(self.session, ref(self.admin), self.instructor.id, self.school.id)

    def test_requires_administrator(self) -> None:
        with self.assertRaises(InsufficientRoleError):
            assign_instructor_to_school(
                self.session, ref(self.instructor), self.instructor.id, self.school.id
            )
