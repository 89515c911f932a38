"""Unit tests for the account status gate."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from juris.core.auth.gate import AccountStatusGate, GateDecision
from juris.core.errors import BackingStoreError


pytestmark = pytest.mark.unit

SUSPENDED_AT = datetime(2026, 1, 5, tzinfo=UTC)


@pytest.fixture
def store() -> AsyncMock:
    store = AsyncMock()
    store.get_suspension.return_value = None
    store.clear_suspension.return_value = True
    return store


class TestAccountStatusGate:
    """Tests for AccountStatusGate.check()."""

    @pytest.mark.parametrize("verified_link", [True, False])
    async def test_active_account_proceeds(self, store: AsyncMock, verified_link: bool):
        decision = await AccountStatusGate(store).check("u1", verified_link=verified_link)

        assert decision is GateDecision.PROCEED
        store.clear_suspension.assert_not_awaited()

    async def test_password_session_on_suspended_account_blocks(self, store: AsyncMock):
        store.get_suspension.return_value = SUSPENDED_AT

        decision = await AccountStatusGate(store).check("u1", verified_link=False)

        assert decision is GateDecision.BLOCK
        store.clear_suspension.assert_not_awaited()

    async def test_verified_link_reactivates(self, store: AsyncMock):
        store.get_suspension.return_value = SUSPENDED_AT

        decision = await AccountStatusGate(store).check("u1", verified_link=True)

        assert decision is GateDecision.REACTIVATE
        store.clear_suspension.assert_awaited_once_with("u1")

    async def test_failed_reactivation_write_blocks(self, store: AsyncMock):
        store.get_suspension.return_value = SUSPENDED_AT
        store.clear_suspension.side_effect = BackingStoreError()

        decision = await AccountStatusGate(store).check("u1", verified_link=True)

        assert decision is GateDecision.BLOCK

    async def test_unconfirmed_reactivation_blocks(self, store: AsyncMock):
        store.get_suspension.return_value = SUSPENDED_AT
        store.clear_suspension.return_value = False

        decision = await AccountStatusGate(store).check("u1", verified_link=True)

        assert decision is GateDecision.BLOCK

    async def test_lookup_failure_propagates(self, store: AsyncMock):
        store.get_suspension.side_effect = BackingStoreError("Account status lookup failed")

        with pytest.raises(BackingStoreError):
            await AccountStatusGate(store).check("u1", verified_link=True)
