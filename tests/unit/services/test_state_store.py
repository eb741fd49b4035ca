"""Unit tests for StateStore."""

from typing import Any

import pytest

from core.exceptions import OrphanSourceError, StateStoreError
from domain.entities.environment import Environment
from domain.entities.group import GroupRecord
from domain.entities.invitation import InvitationRecord
from domain.entities.operation_log import OperationStatus, OperationType
from domain.entities.user import User
from domain.services.state_store import StateStore
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def store(uow: FakeUnitOfWork) -> StateStore:
    return StateStore(lambda: uow)


class TestEnsureUser:
    @pytest.mark.asyncio
    async def test_inserts_and_commits(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        await store.ensure_user("TeamA", "a@example.com")

        user: User = uow.users.ensure.call_args.args[0]
        assert user.id == "teama"
        assert user.is_admin is False
        assert uow.committed


class TestInvitations:
    @pytest.mark.asyncio
    async def test_missing_record_is_not_invited(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.invitations.get.return_value = None

        assert await store.is_invited("teama", Environment.DEV) is False

    @pytest.mark.asyncio
    async def test_already_existed_is_invited(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.invitations.get.return_value = InvitationRecord(
            user_id="teama", environment=Environment.DEV, already_existed=True
        )

        assert await store.is_invited("teama", Environment.DEV) is True

    @pytest.mark.asyncio
    async def test_record_invitation_upserts(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        await store.record_invitation("teama", Environment.QA, already_existed=False)

        uow.invitations.upsert.assert_awaited_once_with("teama", Environment.QA, False)
        assert uow.committed


class TestGroups:
    @pytest.mark.asyncio
    async def test_get_group_api_id(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.groups.get.return_value = GroupRecord(
            user_id="teama", environment=Environment.DEV, api_id="g-1", name="Team A"
        )

        assert await store.get_group_api_id("teama", Environment.DEV) == "g-1"

    @pytest.mark.asyncio
    async def test_record_group_requires_api_id(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        with pytest.raises(ValueError):
            await store.record_group_creation("teama", Environment.DEV, "", "Team A")

        uow.groups.upsert.assert_not_awaited()


class TestSources:
    @pytest.mark.asyncio
    async def test_record_source_links_to_group(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.sources.upsert_linked.return_value = True

        await store.record_source_creation("teama", Environment.DEV, "s-1", "Feed")

        uow.sources.upsert_linked.assert_awaited_once_with("teama", Environment.DEV, "s-1", "Feed")
        assert uow.committed

    @pytest.mark.asyncio
    async def test_record_source_without_group_is_rejected(
        self, store: StateStore, uow: FakeUnitOfWork
    ) -> None:
        uow.sources.upsert_linked.return_value = False

        with pytest.raises(OrphanSourceError):
            await store.record_source_creation("teama", Environment.DEV, "s-1", "Feed")

        assert not uow.committed


class TestGetStatus:
    @pytest.mark.asyncio
    async def test_absent_records_read_as_false(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.users.get.return_value = None
        uow.invitations.get.return_value = None
        uow.groups.get.return_value = None
        uow.sources.get.return_value = None

        status = await store.get_status("ghost", Environment.PROD)

        assert status.invited is False
        assert status.group_created is False
        assert status.source_created is False
        assert status.group_api_id is None
        assert status.email is None


class TestResets:
    @pytest.mark.asyncio
    async def test_reset_user_deletes_all_three_in_one_transaction(
        self, store: StateStore, uow: FakeUnitOfWork
    ) -> None:
        await store.reset_user("teama", Environment.DEV)

        uow.sources.delete_for.assert_awaited_once_with(Environment.DEV, "teama")
        uow.groups.delete_for.assert_awaited_once_with(Environment.DEV, "teama")
        uow.invitations.delete_for.assert_awaited_once_with(Environment.DEV, "teama")
        assert uow.committed

    @pytest.mark.asyncio
    async def test_reset_environment_deletes_all_users(
        self, store: StateStore, uow: FakeUnitOfWork
    ) -> None:
        uow.sources.delete_for.return_value = 1
        uow.groups.delete_for.return_value = 1
        uow.invitations.delete_for.return_value = 2

        await store.reset_environment(Environment.QA)

        uow.invitations.delete_for.assert_awaited_once_with(Environment.QA)


class TestLogOperation:
    @pytest.mark.asyncio
    async def test_creates_entry(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        async def echo(entry: Any) -> Any:
            return entry

        uow.operations.create.side_effect = echo

        entry = await store.log_operation(
            OperationType.INVITE,
            "teama",
            Environment.DEV,
            OperationStatus.SKIPPED,
            error="User already exists",
        )

        assert entry is not None
        assert entry.status == OperationStatus.SKIPPED
        assert entry.error_message == "User already exists"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, store: StateStore, uow: FakeUnitOfWork) -> None:
        uow.operations.create.side_effect = StateStoreError("disk full")

        entry = await store.log_operation(
            OperationType.SETUP, "teama", Environment.DEV, OperationStatus.FAILED
        )

        assert entry is None


class TestClose:
    @pytest.mark.asyncio
    async def test_close_runs_hook_once(self, uow: FakeUnitOfWork) -> None:
        calls = []

        async def on_close() -> None:
            calls.append(1)

        store = StateStore(lambda: uow, on_close=on_close)
        await store.close()
        await store.close()

        assert calls == [1]
