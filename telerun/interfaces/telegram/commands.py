from __future__ import annotations

from typing import List, Tuple

from telerun.application.services import validate_distance, validate_limit

ADD_USAGE = "Usage: /add <distance>"
EDIT_USAGE = "Usage: /edit <run_id> <distance>"
DELETE_USAGE = "Usage: /delete <run_id>"
LIST_USAGE = "Usage: /list <num_runs_to_show>"

# Largest value a SQLite INTEGER or Postgres BIGINT parameter can carry.
MAX_SQL_INTEGER = 2**63 - 1

HELP_TEXT = (
    "The following commands are supported:\n"
    "/help                    - display this text\n"
    "/show                    - show users registered in this chat\n"
    "/add <distance>          - add a run (km)\n"
    "/edit <run_id> <distance> - correct the distance of one of your runs\n"
    "/delete <run_id>         - remove one of your runs\n"
    "/tally                   - tally medals and distances\n"
    "/list <num_runs_to_show> - list recent runs\n"
)


def _arguments(text: str) -> List[str]:
    # Drop the command itself ("/add" or "/add@botname").
    return text.split()[1:]


def _parse_distance(raw: str) -> float:
    return validate_distance(float(raw))


def _parse_run_id(raw: str) -> int:
    run_id = int(raw)
    if run_id <= 0 or run_id > MAX_SQL_INTEGER:
        raise ValueError(f"Invalid run id: {raw}")
    return run_id


def parse_add(text: str) -> float:
    """
    Parse `/add <distance>`.

    Raises ValueError if the distance is missing, not a number, or negative.
    """

    args = _arguments(text)
    if len(args) != 1:
        raise ValueError(ADD_USAGE)
    return _parse_distance(args[0])


def parse_edit(text: str) -> Tuple[int, float]:
    args = _arguments(text)
    if len(args) != 2:
        raise ValueError(EDIT_USAGE)
    return _parse_run_id(args[0]), _parse_distance(args[1])


def parse_delete(text: str) -> int:
    args = _arguments(text)
    if len(args) != 1:
        raise ValueError(DELETE_USAGE)
    return _parse_run_id(args[0])


def parse_list(text: str) -> int:
    args = _arguments(text)
    if len(args) != 1:
        raise ValueError(LIST_USAGE)
    limit = validate_limit(int(args[0]))
    if limit > MAX_SQL_INTEGER:
        raise ValueError(LIST_USAGE)
    return limit
