"""Tests for admin-only user management."""

from bookshelf.schemas.auth import CurrentUser
from bookshelf.services.auth import register_user
from bookshelf.services.users import (
    PermissionDeniedError,
    SelfModificationError,
    delete_user,
    get_user,
    list_users,
    update_user_role,
)
from tests.support import DatabaseTestCase


def identity(user) -> CurrentUser:
    return CurrentUser(id=user.id, username=user.username, email=user.email, role=user.role)


class TestUserManagement(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = register_user(self.session, "admin", "admin@example.com", "password123", "admin")
        self.member = register_user(self.session, "member", "member@example.com", "password123")

    def test_list_users_newest_first(self) -> None:
        ids = [u.id for u in list_users(self.session)]
        self.assertEqual(sorted(ids), sorted([self.admin.id, self.member.id]))
        self.assertEqual(ids[0], self.member.id)

    def test_admin_promotes_member(self) -> None:
        user = update_user_role(self.session, identity(self.admin), self.member.id, "admin")
        self.assertEqual(user.role, "admin")
        self.assertEqual(get_user(self.session, self.member.id).role, "admin")

    def test_admin_cannot_change_own_role(self) -> None:
        with self.assertRaises(SelfModificationError) as ctx:
            update_user_role(self.session, identity(self.admin), self.admin.id, "user")
        self.assertEqual(ctx.exception.message, "You cannot change your own role")

    def test_admin_cannot_delete_self(self) -> None:
        with self.assertRaises(SelfModificationError) as ctx:
            delete_user(self.session, identity(self.admin), self.admin.id)
        self.assertEqual(ctx.exception.message, "You cannot delete your own account")
        self.assertIsNotNone(get_user(self.session, self.admin.id))

    def test_non_admin_cannot_manage_anyone(self) -> None:
        with self.assertRaises(PermissionDeniedError):
            update_user_role(self.session, identity(self.member), self.admin.id, "user")
        with self.assertRaises(PermissionDeniedError):
            delete_user(self.session, identity(self.member), self.admin.id)

    def test_missing_user(self) -> None:
        self.assertIsNone(update_user_role(self.session, identity(self.admin), 999, "admin"))
        self.assertFalse(delete_user(self.session, identity(self.admin), 999))

    def test_admin_deletes_member(self) -> None:
        self.assertTrue(delete_user(self.session, identity(self.admin), self.member.id))
        self.assertIsNone(get_user(self.session, self.member.id))
