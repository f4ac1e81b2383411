"""Service tests for admin user management."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.exceptions import ConflictError, DuplicateIdentity
from stayhub.models.user import ADMIN_PERMISSION_FLAGS, User
from stayhub.schemas.admin import AdminPermissions, AdminUserUpdate, BulkUserOperation
from stayhub.services import user_admin_service


class TestDeactivateUser:
    @pytest.mark.parametrize("status", ["pending", "confirmed", "checked_in"])
    async def test_active_booking_blocks(
        self, db_session: AsyncSession, customer: User, hotel, make_booking, status: str
    ):
        await make_booking(customer, hotel, status=status)
        with pytest.raises(ConflictError, match="Cannot delete user with active bookings"):
            await user_admin_service.deactivate_user(db_session, customer.id)
        await db_session.refresh(customer)
        assert customer.is_active is True

    @pytest.mark.parametrize("status", ["draft", "cancelled", "completed", "checked_out", "no_show"])
    async def test_inactive_bookings_allow_soft_delete(
        self, db_session: AsyncSession, customer: User, hotel, make_booking, status: str
    ):
        await make_booking(customer, hotel, status=status)
        user = await user_admin_service.deactivate_user(db_session, customer.id)
        assert user.is_active is False
        assert await db_session.get(User, customer.id) is not None

    async def test_user_without_bookings(self, db_session: AsyncSession, customer: User):
        user = await user_admin_service.deactivate_user(db_session, customer.id)
        assert user.is_active is False


class TestPermissions:
    def test_admin_defaults_all_granted(self):
        permissions = user_admin_service.resolve_permissions("admin", None)
        assert set(permissions) == set(ADMIN_PERMISSION_FLAGS)
        assert all(permissions.values())

    def test_admin_overrides_applied(self):
        permissions = user_admin_service.resolve_permissions(
            "admin", AdminPermissions(can_manage_users=False)
        )
        assert permissions["can_manage_users"] is False
        assert permissions["can_manage_hotels"] is True

    def test_customer_overrides_ignored(self):
        permissions = user_admin_service.resolve_permissions(
            "customer", AdminPermissions(can_manage_hotels=True)
        )
        assert not any(permissions.values())

    async def test_role_change_resets_permissions(self, db_session: AsyncSession, make_user):
        user = await make_user("admin")
        updated = await user_admin_service.update_role(db_session, user.id, "customer")
        assert updated.role == "customer"
        assert not any(updated.admin_permissions.values())


class TestUpdateUser:
    async def test_duplicate_email_rejected(self, db_session: AsyncSession, make_user):
        first = await make_user("customer")
        second = await make_user("customer")
        with pytest.raises(DuplicateIdentity, match="Email already registered"):
            await user_admin_service.update_user(db_session, second.id, AdminUserUpdate(email=first.email))

    async def test_keeping_own_email_is_fine(self, db_session: AsyncSession, customer: User):
        updated = await user_admin_service.update_user(
            db_session, customer.id, AdminUserUpdate(email=customer.email, first_name="Grace")
        )
        assert updated.first_name == "Grace"


class TestListUsers:
    async def test_filters_and_pagination(self, db_session: AsyncSession, make_user):
        for _ in range(3):
            await make_user("customer")
        await make_user("admin")
        await make_user("customer", is_active=False)

        users, total = await user_admin_service.list_users(
            db_session, page=1, limit=2, role="customer", is_active=True
        )
        assert total == 3
        assert len(users) == 2
        assert all(u.role == "customer" and u.is_active for u in users)

    async def test_search_matches_username(self, db_session: AsyncSession, make_user):
        target = await make_user("customer", username="searchable_one")
        await make_user("customer")
        users, total = await user_admin_service.list_users(db_session, search="searchable")
        assert total == 1
        assert users[0].id == target.id


class TestBulkOperation:
    async def test_deactivate_many(self, db_session: AsyncSession, make_user):
        users = [await make_user("customer") for _ in range(2)]
        body = BulkUserOperation(operation="deactivate", user_ids=[u.id for u in users])
        message, updated = await user_admin_service.bulk_operation(db_session, body)
        assert message == "Users deactivated successfully"
        assert updated == 2
        for user in users:
            await db_session.refresh(user)
            assert user.is_active is False

    async def test_change_role_grants_permissions(self, db_session: AsyncSession, make_user):
        user = await make_user("customer")
        body = BulkUserOperation(operation="changeRole", user_ids=[user.id], role="admin")
        message, updated = await user_admin_service.bulk_operation(db_session, body)
        assert updated == 1
        await db_session.refresh(user)
        assert user.role == "admin"
        assert all(user.admin_permissions.values())

    def test_change_role_requires_role(self):
        with pytest.raises(ValueError):
            BulkUserOperation(operation="changeRole", user_ids=["00000000-0000-0000-0000-000000000001"])
