"""Account status gate.

Runs whenever a session is established or re-established and decides
whether a soft-deleted account may proceed. Only a session established
through a one-time emailed link reactivates a suspended account; a
password (or a restored session) never does.
"""

from enum import Enum

import structlog

from juris.core.auth.interfaces import AccountStatusStore
from juris.core.errors import BackingStoreError


logger = structlog.get_logger()


class GateDecision(str, Enum):
    """Outcome of the account status gate."""

    PROCEED = "proceed"
    REACTIVATE = "reactivate"
    BLOCK = "block"


class AccountStatusGate:
    """Checks the suspension marker before a session is granted."""

    def __init__(self, store: AccountStatusStore) -> None:
        self.store = store

    async def check(self, actor_id: str, *, verified_link: bool) -> GateDecision:
        """Decide whether the session for ``actor_id`` may proceed.

        A ``REACTIVATE`` result means the marker has already been cleared.
        A failed reactivation write yields ``BLOCK``.

        Args:
            actor_id: The account being signed in
            verified_link: Whether the session proves live inbox control

        Raises:
            BackingStoreError: If the suspension marker cannot be read
        """
        suspended_at = await self.store.get_suspension(actor_id)
        if suspended_at is None:
            return GateDecision.PROCEED

        if not verified_link:
            logger.warning("account_gate_blocked", actor_id=actor_id)
            return GateDecision.BLOCK

        try:
            cleared = await self.store.clear_suspension(actor_id)
        except BackingStoreError as e:
            logger.warning(
                "account_reactivation_failed",
                actor_id=actor_id,
                error_code=e.error_code,
            )
            return GateDecision.BLOCK

        if not cleared:
            logger.warning("account_reactivation_failed", actor_id=actor_id)
            return GateDecision.BLOCK

        logger.info("account_reactivated", actor_id=actor_id)
        return GateDecision.REACTIVATE
