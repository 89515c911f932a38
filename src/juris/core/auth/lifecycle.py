"""Session lifecycle manager.

Owns the session state machine::

    UNAUTHENTICATED --login--> AUTHENTICATING --ok--> AUTHENTICATED
    AUTHENTICATED --inactivity--> EXPIRED --> UNAUTHENTICATED (with notice)
    AUTHENTICATED --logout / suspension--> UNAUTHENTICATED (silent)

The session state is a single immutable value replaced by assignment, so
readers never observe an actor without its status. Establishing a session
(login, link login, restore) is serialised by a lock. Ending a session
(logout, expiry, detected suspension) does not wait for the lock: it bumps
an epoch counter, and an in-flight establishment whose epoch is stale
discards its result instead of committing it.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from juris.config import settings
from juris.core.auth.gate import AccountStatusGate, GateDecision
from juris.core.auth.interfaces import (
    AccountStatusStore,
    CredentialAuthenticator,
    SessionStateStore,
)
from juris.core.constants import (
    INACTIVITY_NOTICE,
    SESSION_LAST_ACTIVITY_KEY,
    SESSION_USER_KEY,
)
from juris.core.errors import (
    AccountSuspendedError,
    AuthenticationError,
    ValidationError,
)
from juris.core.permissions import checker
from juris.core.permissions.models import Action, Resource
from juris.modules.offices.schemas import OfficeSnapshot
from juris.modules.users.schemas import MUTABLE_PROFILE_FIELDS, Actor


logger = structlog.get_logger()


class SessionStatus(str, Enum):
    """States of the session state machine."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


class ActivityKind(str, Enum):
    """User interactions that count as activity."""

    POINTER = "pointer"
    KEY = "key"
    TOUCH = "touch"
    SCROLL = "scroll"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session.

    Attributes:
        status: Current state machine state
        actor: The signed-in actor, set only when authenticated
        last_activity: Clock reading of the last qualifying interaction
    """

    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    actor: Actor | None = None
    last_activity: float | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and self.actor is not None


class SessionManager:
    """Single writer of the session state.

    Args:
        authenticator: Credential authenticator collaborator
        account_status: Store holding the account suspension marker
        store: Persisted session state (actor profile, last activity)
        inactivity_timeout: Budget in seconds, defaults to settings
        activity_throttle: Minimum seconds between persisted activity
            writes, defaults to settings
        clock: Returns the current time in seconds
        on_notice: Called with a user-visible message when the session
            expires due to inactivity
    """

    def __init__(
        self,
        authenticator: CredentialAuthenticator,
        account_status: AccountStatusStore,
        store: SessionStateStore,
        *,
        inactivity_timeout: float | None = None,
        activity_throttle: float | None = None,
        clock: Callable[[], float] = time.time,
        on_notice: Callable[[str], None] | None = None,
    ) -> None:
        self.authenticator = authenticator
        self.store = store
        self.gate = AccountStatusGate(account_status)
        self.inactivity_timeout = (
            inactivity_timeout
            if inactivity_timeout is not None
            else settings.inactivity_timeout_seconds
        )
        self.activity_throttle = (
            activity_throttle
            if activity_throttle is not None
            else settings.activity_throttle_seconds
        )
        self._clock = clock
        self._on_notice = on_notice

        self._state = SessionState()
        self._lock = asyncio.Lock()
        self._epoch = 0
        self._timer: asyncio.TimerHandle | None = None
        self._last_persisted: float | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ============================================================
    # Read access
    # ============================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def current_actor(self) -> Actor | None:
        """The signed-in actor, or None unless authenticated."""
        state = self._state
        return state.actor if state.is_authenticated else None

    def can(self, office: OfficeSnapshot | None, resource: Resource, action: Action) -> bool:
        """Access check for the current actor."""
        return checker.can(self.current_actor, office, resource, action)

    # ============================================================
    # Establishing a session
    # ============================================================

    async def login(self, email: str, password: str) -> None:
        """Sign in with email and password.

        A password never reactivates a suspended account.

        Raises:
            AuthenticationError: If the credentials are rejected
            AccountSuspendedError: If the account is suspended
            BackingStoreError: If a collaborator store fails
        """
        async with self._lock:
            epoch = await self._begin(supersede=True)
            try:
                actor = await self.authenticator.authenticate(email, password)
                await self._admit(epoch, actor, verified_link=False, source="password")
            except BaseException:
                await self._abandon(epoch, clear=True)
                raise

    async def login_with_link(self, email: str, token: str) -> None:
        """Sign in by redeeming a one-time emailed link.

        This is the only path that reactivates a suspended account.

        Raises:
            AuthenticationError: If the link is invalid, expired or reused
            AccountSuspendedError: If reactivation could not be completed
            BackingStoreError: If a collaborator store fails
        """
        async with self._lock:
            epoch = await self._begin(supersede=True)
            try:
                raw = await self.authenticator.verify_link(email, token)
                await self._admit(
                    epoch, raw.actor, verified_link=raw.verified_link, source="link"
                )
            except BaseException:
                await self._abandon(epoch, clear=True)
                raise

    async def restore(self) -> bool:
        """Re-establish a persisted session on process start.

        A restored session never reactivates a suspended account; a
        suspended one is ended silently. A persisted last-activity stamp
        whose age has reached the inactivity budget expires the session at
        once, the same boundary `check_inactivity` uses.

        Returns:
            True if the session is now authenticated

        Raises:
            BackingStoreError: If a collaborator store fails
        """
        async with self._lock:
            epoch = await self._begin()
            try:
                raw = await self.authenticator.establish_from_persisted()
                if raw is None:
                    await self._abandon(epoch)
                    return False

                last_activity = await self._read_last_activity()
                if (
                    last_activity is not None
                    and self._clock() - last_activity >= self.inactivity_timeout
                ):
                    if self._epoch == epoch:
                        logger.info("restored_session_stale", actor_id=raw.actor.id)
                        await self._terminate(notice=INACTIVITY_NOTICE, event="session_expired")
                    return False

                try:
                    await self._admit(
                        epoch,
                        raw.actor,
                        verified_link=False,
                        source="restore",
                        last_activity=last_activity,
                    )
                except AccountSuspendedError:
                    return False
            except BaseException:
                await self._abandon(epoch)
                raise
            return self._epoch == epoch and self.is_authenticated

    async def _begin(self, *, supersede: bool = False) -> int:
        """Enter AUTHENTICATING.

        With ``supersede``, a session that is currently established is torn
        down in the store as well, so a failed sign-in cannot leave it
        restorable.
        """
        previous = self._state.actor if self._state.is_authenticated else None
        self._epoch += 1
        epoch = self._epoch
        self._cancel_timer()
        self._last_persisted = None
        self._state = SessionState(status=SessionStatus.AUTHENTICATING)
        if supersede and previous is not None:
            logger.info("session_replaced", actor_id=previous.id)
            try:
                await self._clear_persisted()
            except BaseException:
                await self._abandon(epoch)
                raise
        return epoch

    async def _abandon(self, epoch: int, *, clear: bool = False) -> None:
        if self._epoch != epoch:
            return
        self._state = SessionState()
        if clear:
            await self._clear_persisted()

    async def _admit(
        self,
        epoch: int,
        actor: Actor,
        *,
        verified_link: bool,
        source: str,
        last_activity: float | None = None,
    ) -> None:
        """Run the account status gate and commit the session.

        Raises:
            AccountSuspendedError: If the gate blocks the session
        """
        decision = await self.gate.check(actor.id, verified_link=verified_link)

        if self._epoch != epoch:
            await self._discard(actor, source)
            return

        if decision is GateDecision.BLOCK:
            await self._terminate(event="session_blocked", actor_id=actor.id)
            raise AccountSuspendedError(details={"actor_id": actor.id})

        await self.store.set(SESSION_USER_KEY, actor.model_dump_json())
        if self._epoch != epoch:
            await self._discard(actor, source)
            return

        now = self._clock()
        self._state = SessionState(
            status=SessionStatus.AUTHENTICATED,
            actor=actor,
            last_activity=last_activity if last_activity is not None else now,
        )
        self._arm_timer()
        logger.info(
            "session_established",
            actor_id=actor.id,
            source=source,
            reactivated=decision is GateDecision.REACTIVATE,
        )
        if last_activity is None:
            await self._persist_activity(now)

    async def _discard(self, actor: Actor, source: str) -> None:
        # Preempted by logout or expiry; the later end wins
        logger.warning("session_establish_preempted", actor_id=actor.id, source=source)
        await self.authenticator.end_session()

    # ============================================================
    # Ending a session
    # ============================================================

    async def logout(self) -> None:
        """End the session without a notice.

        Preempts an in-flight login or restore.
        """
        actor = self._state.actor
        await self._terminate(event="session_logout", actor_id=actor.id if actor else None)

    async def revalidate(self) -> bool:
        """Re-check the account status mid-session.

        A suspended account ends the session silently. Lookup failures
        propagate and leave the session unchanged.

        Returns:
            True if the session is still authenticated
        """
        actor = self.current_actor
        if actor is None:
            return False
        epoch = self._epoch
        decision = await self.gate.check(actor.id, verified_link=False)
        if self._epoch != epoch:
            return self.is_authenticated
        if decision is GateDecision.BLOCK:
            await self._terminate(event="session_revoked", actor_id=actor.id)
            return False
        return True

    async def check_inactivity(self) -> bool:
        """Expire the session if the inactivity budget has elapsed.

        Returns:
            True if the session was expired by this call
        """
        state = self._state
        if not state.is_authenticated or state.last_activity is None:
            return False
        if self._clock() - state.last_activity < self.inactivity_timeout:
            return False
        await self._expire(self._epoch)
        return True

    async def _expire(self, epoch: int) -> None:
        if self._epoch != epoch or not self.is_authenticated:
            return
        actor = self._state.actor
        await self._terminate(
            notice=INACTIVITY_NOTICE,
            event="session_expired",
            actor_id=actor.id if actor else None,
        )

    async def _terminate(self, *, event: str, notice: str | None = None, **kw: Any) -> None:
        """End the session: state first, collaborator cleanup after."""
        self._epoch += 1
        self._cancel_timer()
        self._last_persisted = None

        if notice is not None:
            self._state = SessionState(status=SessionStatus.EXPIRED)
            if self._on_notice is not None:
                self._on_notice(notice)
        self._state = SessionState()
        logger.info(event, **kw)

        await self._clear_persisted()

    async def _clear_persisted(self) -> None:
        await self.authenticator.end_session()
        await self.store.delete(SESSION_USER_KEY, SESSION_LAST_ACTIVITY_KEY)

    # ============================================================
    # Activity tracking
    # ============================================================

    async def record_activity(self, kind: ActivityKind = ActivityKind.POINTER) -> None:
        """Register a user interaction.

        Re-arms the inactivity timer. The persisted stamp is written at
        most once per throttle window.
        """
        state = self._state
        if not state.is_authenticated:
            return
        now = self._clock()
        self._state = replace(state, last_activity=now)
        self._arm_timer()

        if (
            self._last_persisted is None
            or now - self._last_persisted >= self.activity_throttle
        ):
            await self._persist_activity(now)

    async def _persist_activity(self, now: float) -> None:
        self._last_persisted = now
        await self.store.set(SESSION_LAST_ACTIVITY_KEY, repr(now))

    async def _read_last_activity(self) -> float | None:
        value = await self.store.get(SESSION_LAST_ACTIVITY_KEY)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            logger.warning("last_activity_unreadable", value=value)
            return None

    def _arm_timer(self) -> None:
        self._cancel_timer()
        state = self._state
        if state.last_activity is None:
            return
        remaining = self.inactivity_timeout - (self._clock() - state.last_activity)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(max(remaining, 0), self._on_timer, self._epoch)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, epoch: int) -> None:
        self._timer = None
        if epoch != self._epoch:
            return
        task = asyncio.get_running_loop().create_task(self._expire(epoch))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("session_expiry_failed", exc_info=task.exception())

    # ============================================================
    # Profile
    # ============================================================

    async def update_profile(self, **changes: Any) -> Actor:
        """Change mutable profile fields of the current actor.

        Raises:
            AuthenticationError: If no session is established
            ValidationError: If a field is not mutable or a value is invalid
        """
        actor = self.current_actor
        if actor is None:
            raise AuthenticationError("Not signed in", error_code="not_authenticated")

        immutable = sorted(set(changes) - MUTABLE_PROFILE_FIELDS)
        if immutable:
            raise ValidationError(
                "Profile field cannot be changed",
                errors=[{"field": f, "message": "Field is immutable"} for f in immutable],
            )

        try:
            updated = Actor.model_validate({**actor.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid profile data",
                errors=[
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
            ) from e

        epoch = self._epoch
        await self.store.set(SESSION_USER_KEY, updated.model_dump_json())
        if self._epoch == epoch and self._state.actor == actor:
            self._state = replace(self._state, actor=updated)
        return updated

    async def close(self) -> None:
        """Stop timers and pending expiry tasks. Persisted state is kept."""
        self._cancel_timer()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
