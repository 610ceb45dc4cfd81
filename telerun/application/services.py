from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from telerun.domain.errors import IdentityNotResolvable
from telerun.domain.models import Identity, OwnerConstraint, Run, Score
from telerun.domain.repositories import IdentityRepository, RunRepository
from telerun.domain.results import (
    NO_DATA,
    MutationOutcome,
    QueryResult,
    rows_or_no_data,
)

LOGGER = logging.getLogger(__name__)


@dataclass
class ChatContext:
    """
    Information about the caller of a chat command.

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    chat_id: str
    external_user_id: str
    display_name: str

    def owner_constraint(self) -> OwnerConstraint:
        return OwnerConstraint(
            chat_id=self.chat_id,
            external_user_id=self.external_user_id,
        )


def validate_distance(distance: float) -> float:
    if not math.isfinite(distance) or distance < 0:
        raise ValueError("Distance must be a non-negative number of kilometres.")
    return distance


def validate_limit(limit: int) -> int:
    if limit < 0:
        raise ValueError("Limit must not be negative.")
    return limit


def resolve_or_create_identity(
    ctx: ChatContext,
    identity_repo: IdentityRepository,
) -> Identity:
    """
    Look up the caller's identity, creating it on first use.

    Two near-simultaneous first submissions from the same user can both miss
    the lookup; the repository ignores the losing insert, and both callers
    then re-read the single stored row.
    """

    existing = identity_repo.find_identity(
        ctx.chat_id, ctx.external_user_id, ctx.display_name
    )
    if existing is not None:
        return existing

    identity_repo.insert_identity(ctx.chat_id, ctx.external_user_id, ctx.display_name)
    LOGGER.debug(
        "Registered %s (external id %s) in chat %s",
        ctx.display_name,
        ctx.external_user_id,
        ctx.chat_id,
    )

    stored = identity_repo.find_identity(
        ctx.chat_id, ctx.external_user_id, ctx.display_name
    )
    if stored is None:
        LOGGER.error(
            "Identity missing after insert: chat_id=%s external_user_id=%s",
            ctx.chat_id,
            ctx.external_user_id,
        )
        raise IdentityNotResolvable(ctx.chat_id, ctx.external_user_id)
    return stored


def list_identities(
    chat_id: str,
    identity_repo: IdentityRepository,
) -> QueryResult[Identity]:
    """Return the identities registered in `chat_id`, or `NO_DATA`."""

    return rows_or_no_data(identity_repo.get_identities_in_chat(chat_id))


def submit_run(distance: float, identity: Identity, run_repo: RunRepository) -> int:
    """Record a run for an already resolved identity and return the run id."""

    return run_repo.add_run(distance, identity.id)


def submit_run_for_user(
    distance: float,
    ctx: ChatContext,
    identity_repo: IdentityRepository,
    run_repo: RunRepository,
) -> int:
    """
    Resolve (or create) the caller's identity, then record the run.

    The two steps are not wrapped in a transaction: if the insert of the run
    fails, the freshly created identity stays behind without runs.
    """

    identity = resolve_or_create_identity(ctx, identity_repo)
    return submit_run(distance, identity, run_repo)


def list_runs(
    chat_id: str,
    limit: int,
    identity_repo: IdentityRepository,
    run_repo: RunRepository,
) -> QueryResult[Run]:
    """
    Return the `limit` most recent runs of the chat, newest first.
    """

    validate_limit(limit)

    identities = identity_repo.get_identities_in_chat(chat_id)
    if not identities:
        return NO_DATA

    user_ids = [identity.id for identity in identities]
    return rows_or_no_data(run_repo.get_runs_for_users(user_ids, limit))


def edit_run(
    run_id: int,
    distance: float,
    owner: OwnerConstraint,
    run_repo: RunRepository,
) -> MutationOutcome:
    """
    Change the distance of a run submitted by `owner`.

    `NO_MATCH` covers both "no such run" and "run belongs to someone else";
    in either case nothing is modified.
    """

    return MutationOutcome.from_rowcount(run_repo.update_run(run_id, distance, owner))


def delete_run(
    run_id: int,
    owner: OwnerConstraint,
    run_repo: RunRepository,
) -> MutationOutcome:
    """Delete a run submitted by `owner`; see `edit_run` for `NO_MATCH`."""

    return MutationOutcome.from_rowcount(run_repo.delete_run(run_id, owner))


def tally(
    chat_id: str,
    identity_repo: IdentityRepository,
    run_repo: RunRepository,
) -> QueryResult[Score]:
    """
    Rank the chat's runners by total distance, longest first.

    Only identities with at least one run are scored. Ties keep the order in
    which the store grouped them.
    """

    identities = identity_repo.get_identities_in_chat(chat_id)
    if not identities:
        return NO_DATA

    scores = run_repo.tally_for_users([identity.id for identity in identities])
    # sorted() is stable, so equal distances keep their grouping order.
    ranked = sorted(scores, key=lambda score: score.distance, reverse=True)
    return rows_or_no_data(ranked)
