"""Collaborator contracts consumed by the session lifecycle.

The core treats these as black boxes. Reference implementations live in
``juris.core.auth.authenticator``, ``juris.core.cache`` and the module
repositories.
"""

from datetime import datetime
from typing import Protocol

from juris.core.auth.schemas import RawSession
from juris.modules.offices.schemas import OfficeSnapshot
from juris.modules.users.schemas import Actor


class CredentialAuthenticator(Protocol):
    """Establishes and ends authenticated sessions."""

    async def authenticate(self, email: str, password: str) -> Actor:
        """Verify a password. Raises ``AuthenticationError`` on rejection."""
        ...

    async def verify_link(self, email: str, token: str) -> RawSession:
        """Redeem a one-time sign-in link. The result has ``verified_link=True``."""
        ...

    async def establish_from_persisted(self) -> RawSession | None:
        """Restore a previously established session, if any."""
        ...

    async def end_session(self) -> None:
        """Discard the current session on the authenticator's side."""
        ...


class AccountStatusStore(Protocol):
    """Reads and clears the account suspension marker."""

    async def get_suspension(self, user_id: str) -> datetime | None: ...

    async def clear_suspension(self, user_id: str) -> bool: ...


class TenantStore(Protocol):
    """Provides office snapshots with their member lists."""

    async def get_tenant(self, office_id: str) -> OfficeSnapshot | None: ...

    async def list_tenants_for_actor(self, actor_id: str) -> list[OfficeSnapshot]: ...


class SessionStateStore(Protocol):
    """Opaque key-value store for restoration data and activity stamps."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, *keys: str) -> None: ...
