"""Plain-text rendering of query results for chat replies."""

from __future__ import annotations

from typing import List

from telerun.domain.models import Identity, Run, Score
from telerun.domain.results import NoData, QueryResult

NO_RUNS_TEXT = "No runs in database."
NO_USERS_TEXT = "No users in database."
NO_TALLY_TEXT = "Cannot generate tally."

PODIUM = ["🥇", "🥈", "🥉"]
RUNNER = "🏃"
LAST_PLACE = "🤡"


def format_distance(distance: float) -> str:
    """Render the exact stored distance, dropping a bare ".0": 20.0 -> "20"."""

    text = repr(float(distance))
    if text.endswith(".0"):
        return text[:-2]
    return text


def rank_glyph(position: int, total: int) -> str:
    """Return the glyph for 1-based `position` in a tally of `total` entries."""

    if position <= len(PODIUM):
        return PODIUM[position - 1]
    if position == total:
        return LAST_PLACE
    return RUNNER


def _run_line(run: Run) -> str:
    run_time = str(run.run_datetime) if run.run_datetime is not None else "NULL"
    return f"{run.id} {format_distance(run.distance)} {run_time} {run.user_id}"


def list_runs_text(result: QueryResult[Run]) -> str:
    if isinstance(result, NoData):
        return NO_RUNS_TEXT

    lines: List[str] = ["#. RunID Distance RunTime"]
    lines.extend(f"{i}. {_run_line(run)}" for i, run in enumerate(result, start=1))
    return "\n".join(lines) + "\n"


def list_users_text(result: QueryResult[Identity]) -> str:
    if isinstance(result, NoData):
        return NO_USERS_TEXT

    lines: List[str] = ["#. UserID UserName"]
    lines.extend(
        f"{i}. {identity.id} {identity.display_name}"
        for i, identity in enumerate(result, start=1)
    )
    return "\n".join(lines) + "\n"


def tally_text(result: QueryResult[Score]) -> str:
    """
    Render a ranked tally. Position 1 is the first score in `result`.
    """

    if isinstance(result, NoData):
        return NO_TALLY_TEXT

    total = len(result)
    lines: List[str] = ["#. UserName Medals Distance (km)"]
    for i, score in enumerate(result, start=1):
        lines.append(
            f"{rank_glyph(i, total)} {i}. {score.display_name} "
            f"{score.medals}🏅 {format_distance(score.distance)}km"
        )
    return "\n".join(lines) + "\n"
