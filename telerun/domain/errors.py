from __future__ import annotations


class TelerunError(Exception):
    """Base class for failures raised by the run ledger."""


class StoreUnavailable(TelerunError):
    """The database could not be reached or a query failed at transport level."""


class ConstraintViolation(TelerunError):
    """A write was rejected by a schema constraint."""


class IdentityNotResolvable(TelerunError):
    """
    An identity insert went through but re-reading it found nothing.

    This indicates a data-consistency bug rather than a user error.
    """

    def __init__(self, chat_id: str, external_user_id: str) -> None:
        super().__init__(
            f"Identity for external user {external_user_id} in chat {chat_id} "
            "could not be resolved after insert."
        )
        self.chat_id = chat_id
        self.external_user_id = external_user_id
