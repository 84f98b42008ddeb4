"""Tests for app.services.users and app.services.roles against an in-memory database."""

from unittest.mock import patch

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import OperationalError

from app.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from app.core.security import verify_password
from app.models import AuditLog, User, UserRole
from app.schemas.role import RoleCreate, RoleUpdate
from app.schemas.user import UserCreate, UserUpdate
from app.services import audit, roles as role_service, users as user_service
from tests.support import DatabaseTestCase, audit_actions


def _ada(**overrides: object) -> UserCreate:
    data = {"name": "Ada", "email": "ada@x.com", "password": "Aa1!aaaa", "roleIds": []}
    data.update(overrides)
    return UserCreate.model_validate(data)


class TestCreateUser(DatabaseTestCase):
    def test_create_with_roles_resolves_roles_and_audits_once(self) -> None:
        payload = _ada(roleIds=[self.staff_role_id, self.superadmin_role_id])
        user = user_service.create_user(self.db, payload, actor_user_id=self.admin_id)

        self.assertEqual(
            sorted(r.id for r in user.roles),
            sorted([self.staff_role_id, self.superadmin_role_id]),
        )
        self.assertTrue(verify_password("Aa1!aaaa", user.hashed_password))
        self.assertEqual(audit_actions(self.db, user.id), ["USER_CREATE"])
        entry = self.db.query(AuditLog).filter(AuditLog.target_id == str(user.id)).one()
        self.assertEqual(entry.actor_user_id, self.admin_id)
        self.assertEqual(entry.target_type, "User")
        self.assertEqual(
            entry.details,
            {"name": "Ada", "email": "ada@x.com", "roles": [self.staff_role_id, self.superadmin_role_id]},
        )

    def test_create_without_roles(self) -> None:
        user = user_service.create_user(self.db, _ada(), actor_user_id=self.admin_id)
        self.assertEqual(user.roles, [])

    def test_duplicate_role_ids_are_collapsed(self) -> None:
        payload = _ada(roleIds=[self.staff_role_id, self.staff_role_id])
        user = user_service.create_user(self.db, payload, actor_user_id=self.admin_id)
        self.assertEqual([r.id for r in user.roles], [self.staff_role_id])

    def test_unknown_role_ids_rejected_without_writes(self) -> None:
        users_before = self.db.query(User).count()
        with self.assertRaises(ValidationError) as ctx:
            user_service.create_user(
                self.db, _ada(roleIds=[self.staff_role_id, 999]), actor_user_id=self.admin_id
            )
        self.assertEqual(ctx.exception.message, "Some roles do not exist")
        self.assertEqual(self.db.query(User).count(), users_before)
        self.assertEqual(audit_actions(self.db), [])

    def test_duplicate_email_is_conflict_and_commits_nothing(self) -> None:
        counts = (
            self.db.query(User).count(),
            self.db.query(UserRole).count(),
            self.db.query(AuditLog).count(),
        )
        with self.assertRaises(ConflictError) as ctx:
            user_service.create_user(
                self.db,
                _ada(email="superadmin@example.com", roleIds=[self.staff_role_id]),
                actor_user_id=self.admin_id,
            )
        self.assertEqual(ctx.exception.message, "Email already exists")
        self.assertEqual(
            (
                self.db.query(User).count(),
                self.db.query(UserRole).count(),
                self.db.query(AuditLog).count(),
            ),
            counts,
        )

    def test_failure_inside_transaction_rolls_back_user(self) -> None:
        with patch.object(audit, "record", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            with self.assertRaises(InternalError):
                user_service.create_user(self.db, _ada(), actor_user_id=self.admin_id)
        self.assertIsNone(self.db.query(User).filter(User.email == "ada@x.com").first())

    def test_schema_rejects_weak_password_and_short_name(self) -> None:
        with self.assertRaises(SchemaValidationError):
            _ada(password="password")
        with self.assertRaises(SchemaValidationError):
            _ada(name="A")
        with self.assertRaises(SchemaValidationError):
            _ada(email="not-an-email")
        with self.assertRaises(SchemaValidationError):
            _ada(roleIds=[0])


class TestUpdateUser(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        user = user_service.create_user(
            self.db, _ada(roleIds=[self.staff_role_id]), actor_user_id=self.admin_id
        )
        self.user_id = user.id
        self.original_hash = user.hashed_password

    def test_omitting_role_ids_keeps_roles(self) -> None:
        user = user_service.update_user(
            self.db, self.user_id, UserUpdate.model_validate({"name": "Ada L"}), self.admin_id
        )
        self.assertEqual(user.name, "Ada L")
        self.assertEqual([r.id for r in user.roles], [self.staff_role_id])

    def test_empty_role_ids_removes_all_roles(self) -> None:
        user = user_service.update_user(
            self.db, self.user_id, UserUpdate.model_validate({"roleIds": []}), self.admin_id
        )
        self.assertEqual(user.roles, [])
        self.assertEqual(self.db.query(UserRole).filter(UserRole.user_id == self.user_id).count(), 0)

    def test_role_ids_replace_the_set(self) -> None:
        user = user_service.update_user(
            self.db,
            self.user_id,
            UserUpdate.model_validate({"roleIds": [self.superadmin_role_id]}),
            self.admin_id,
        )
        self.assertEqual([r.id for r in user.roles], [self.superadmin_role_id])

    def test_empty_password_keeps_current_hash(self) -> None:
        user = user_service.update_user(
            self.db, self.user_id, UserUpdate.model_validate({"password": ""}), self.admin_id
        )
        self.assertEqual(user.hashed_password, self.original_hash)

    def test_new_password_is_hashed_and_redacted_in_audit(self) -> None:
        user = user_service.update_user(
            self.db, self.user_id, UserUpdate.model_validate({"password": "Bb2@bbbb"}), self.admin_id
        )
        self.assertTrue(verify_password("Bb2@bbbb", user.hashed_password))
        entry = (
            self.db.query(AuditLog)
            .filter(AuditLog.action == "USER_UPDATE", AuditLog.target_id == str(self.user_id))
            .one()
        )
        self.assertEqual(entry.details, {"password": "[REDACTED]"})

    def test_weak_new_password_rejected_by_schema(self) -> None:
        with self.assertRaises(SchemaValidationError):
            UserUpdate.model_validate({"password": "weakpass"})

    def test_one_update_audit_entry_with_payload(self) -> None:
        user_service.update_user(
            self.db,
            self.user_id,
            UserUpdate.model_validate({"name": "Ada L", "roleIds": []}),
            self.admin_id,
        )
        self.assertEqual(audit_actions(self.db, self.user_id), ["USER_CREATE", "USER_UPDATE"])
        entry = self.db.query(AuditLog).filter(AuditLog.action == "USER_UPDATE").one()
        self.assertEqual(entry.details, {"name": "Ada L", "roleIds": []})

    def test_unknown_user_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            user_service.update_user(self.db, 4242, UserUpdate.model_validate({"name": "Nobody"}), self.admin_id)
        self.assertEqual(audit_actions(self.db, 4242), [])

    def test_unknown_role_rejected_and_roles_untouched(self) -> None:
        with self.assertRaises(ValidationError):
            user_service.update_user(
                self.db, self.user_id, UserUpdate.model_validate({"roleIds": [999]}), self.admin_id
            )
        self.assertEqual(
            [link.role_id for link in self.db.query(UserRole).filter(UserRole.user_id == self.user_id)],
            [self.staff_role_id],
        )

    def test_email_taken_by_other_user_is_conflict(self) -> None:
        with self.assertRaises(ConflictError):
            user_service.update_user(
                self.db,
                self.user_id,
                UserUpdate.model_validate({"email": "superadmin@example.com", "roleIds": []}),
                self.admin_id,
            )
        # Role replacement rolled back with the failed email change.
        self.assertEqual(
            self.db.query(UserRole).filter(UserRole.user_id == self.user_id).count(), 1
        )
        self.assertEqual(audit_actions(self.db, self.user_id), ["USER_CREATE"])


class TestDeleteUser(DatabaseTestCase):
    def test_delete_cascades_links_and_audits(self) -> None:
        user = user_service.create_user(
            self.db, _ada(roleIds=[self.staff_role_id]), actor_user_id=self.admin_id
        )
        user_id = user.id
        deleted = user_service.delete_user(self.db, user_id, actor_user_id=self.admin_id)

        self.assertEqual((deleted.id, deleted.name, deleted.email), (user_id, "Ada", "ada@x.com"))
        self.assertIsNone(self.db.get(User, user_id))
        self.assertEqual(self.db.query(UserRole).filter(UserRole.user_id == user_id).count(), 0)
        entry = self.db.query(AuditLog).filter(AuditLog.action == "USER_DELETE").one()
        self.assertEqual(entry.details, {"name": "Ada", "email": "ada@x.com"})

    def test_delete_unknown_user_is_not_found_and_not_audited(self) -> None:
        with self.assertRaises(NotFoundError):
            user_service.delete_user(self.db, 4242, actor_user_id=self.admin_id)
        self.assertEqual(audit_actions(self.db), [])

    def test_cannot_delete_self(self) -> None:
        with self.assertRaises(ValidationError):
            user_service.delete_user(self.db, self.admin_id, actor_user_id=self.admin_id)
        self.assertIsNotNone(self.db.get(User, self.admin_id))

    def test_audit_trail_survives_actor_deletion(self) -> None:
        other_admin = user_service.create_user(
            self.db,
            _ada(email="other@x.com", roleIds=[self.superadmin_role_id]),
            actor_user_id=self.admin_id,
        )
        other_id = other_admin.id
        target = user_service.create_user(self.db, _ada(), actor_user_id=other_id)
        target_id = target.id
        user_service.delete_user(self.db, other_id, actor_user_id=self.admin_id)
        self.db.expire_all()
        entry = self.db.query(AuditLog).filter(AuditLog.target_id == str(target_id)).one()
        self.assertIsNone(entry.actor_user_id)


class TestRoles(DatabaseTestCase):
    def test_assign_role_is_idempotent(self) -> None:
        user = user_service.create_user(self.db, _ada(), actor_user_id=self.admin_id)
        user_id = user.id
        first = role_service.assign_role(self.db, user_id, self.staff_role_id, self.admin_id)
        second = role_service.assign_role(self.db, user_id, self.staff_role_id, self.admin_id)

        self.assertEqual(first.id, second.id)
        self.assertEqual(
            self.db.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role_id == self.staff_role_id)
            .count(),
            1,
        )
        self.assertEqual(audit_actions(self.db, user_id), ["USER_CREATE", "ROLE_ASSIGN", "ROLE_ASSIGN"])

    def test_assign_unknown_user_or_role_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            role_service.assign_role(self.db, 4242, self.staff_role_id, self.admin_id)
        with self.assertRaises(NotFoundError):
            role_service.assign_role(self.db, self.admin_id, 4242, self.admin_id)
        self.assertEqual(audit_actions(self.db), [])

    def test_create_and_update_role(self) -> None:
        role = role_service.create_role(
            self.db, RoleCreate(name="auditor", permissions=["audit:read"]), self.admin_id
        )
        role_id = role.id
        self.assertEqual(role.permissions, ["audit:read"])

        updated = role_service.update_role(
            self.db, role_id, RoleUpdate(permissions=["audit:read", "analytics:read"]), self.admin_id
        )
        self.assertEqual(updated.name, "auditor")
        self.assertEqual(updated.permissions, ["audit:read", "analytics:read"])
        self.assertEqual(audit_actions(self.db, role_id), ["ROLE_CREATE", "ROLE_UPDATE"])

    def test_duplicate_role_name_is_conflict(self) -> None:
        with self.assertRaises(ConflictError) as ctx:
            role_service.create_role(self.db, RoleCreate(name="staff"), self.admin_id)
        self.assertEqual(ctx.exception.message, "Role name already exists")

    def test_update_unknown_role_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            role_service.update_role(self.db, 4242, RoleUpdate(name="ghost"), self.admin_id)
