from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Identity:
    """
    Domain representation of a runner registered in a chat.

    An identity binds a chat-scoped external user (e.g. a Telegram user id)
    to the display name they ran under. The triple
    (chat_id, external_user_id, display_name) is unique.
    """

    id: int
    chat_id: str
    external_user_id: str
    display_name: str


@dataclass
class Run:
    """
    One recorded distance entry (kilometres) owned by an identity.

    `run_datetime` is assigned by the store on insert; rows written by older
    versions of the bot may not carry one.
    """

    id: int
    distance: float
    run_datetime: Optional[datetime]
    user_id: int


@dataclass
class Score:
    """Aggregated standing of one identity within a chat."""

    display_name: str
    medals: int
    distance: float


@dataclass(frozen=True)
class OwnerConstraint:
    """
    Restricts a mutation to runs submitted by `external_user_id` within `chat_id`.
    """

    chat_id: str
    external_user_id: str
