from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .models import Identity, OwnerConstraint, Run, Score


class IdentityRepository(Protocol):
    """
    Persistence of chat identities (the `users` table).

    Implementations are responsible for:
    - Mapping between database rows and the `Identity` domain model.
    - Translating driver errors into `StoreUnavailable` / `ConstraintViolation`.
    """

    def find_identity(
        self,
        chat_id: str,
        external_user_id: str,
        display_name: str,
    ) -> Optional[Identity]:
        """Return the identity stored under the full key, or None."""

        ...

    def insert_identity(
        self,
        chat_id: str,
        external_user_id: str,
        display_name: str,
    ) -> None:
        """
        Insert an identity for the given key.

        A row that already exists under the same key (including one inserted
        concurrently by another handler) must be treated as a no-op.
        """

        ...

    def get_identities_in_chat(self, chat_id: str) -> List[Identity]:
        """Return every identity registered in `chat_id`."""

        ...


class RunRepository(Protocol):
    """
    Persistence of runs (the `runs` table).

    Queries take the identity ids of a chat rather than the chat itself so
    that runs are only ever selected through their chat's membership.
    """

    def add_run(self, distance: float, user_id: int) -> int:
        """Insert a run, stamped by the store's clock, and return its id."""

        ...

    def get_runs_for_users(self, user_ids: Sequence[int], limit: int) -> List[Run]:
        """Return at most `limit` runs of `user_ids`, most recent first."""

        ...

    def update_run(self, run_id: int, distance: float, owner: OwnerConstraint) -> int:
        """
        Set the distance of run `run_id` if it is owned by `owner`.

        Returns the number of rows changed (0 or 1).
        """

        ...

    def delete_run(self, run_id: int, owner: OwnerConstraint) -> int:
        """Delete run `run_id` if it is owned by `owner`; return rows removed."""

        ...

    def tally_for_users(self, user_ids: Sequence[int]) -> List[Score]:
        """Return run count and summed distance per identity that has runs."""

        ...
