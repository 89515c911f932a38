"""Authentication, account status gate and session lifecycle."""

from juris.core.auth.authenticator import DatabaseAuthenticator
from juris.core.auth.backend import (
    create_link_token,
    create_session_token,
    decode_link_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from juris.core.auth.gate import AccountStatusGate, GateDecision
from juris.core.auth.lifecycle import (
    ActivityKind,
    SessionManager,
    SessionState,
    SessionStatus,
)
from juris.core.auth.schemas import LinkTokenData, RawSession, SessionTokenData


__all__ = [
    # Gate
    "AccountStatusGate",
    # Session lifecycle
    "ActivityKind",
    # Authenticator
    "DatabaseAuthenticator",
    "GateDecision",
    # Schemas
    "LinkTokenData",
    "RawSession",
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "SessionTokenData",
    # Token utilities
    "create_link_token",
    "create_session_token",
    "decode_link_token",
    "decode_session_token",
    # Password utilities
    "hash_password",
    "verify_password",
]
