"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from juris.modules.users.schemas import Actor


class RawSession(BaseModel):
    """A session as reported by the credential authenticator.

    Attributes:
        actor: The identity the session belongs to
        verified_link: True when the session was established by redeeming
            a one-time emailed link, proving live control of the inbox
    """

    model_config = ConfigDict(frozen=True)

    actor: Actor
    verified_link: bool = False


class SessionTokenData(BaseModel):
    """Claims carried by a persisted session token.

    Attributes:
        user_id: The actor's ID
        amr: Authentication methods used (``pwd``, ``otp``)
        exp: Token expiration time
        jti: Unique token ID
    """

    user_id: str
    amr: list[str]
    exp: datetime
    jti: str | None = None


class LinkTokenData(BaseModel):
    """Claims carried by a one-time sign-in link token."""

    user_id: str
    email: str
    exp: datetime
    jti: str
