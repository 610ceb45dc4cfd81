from __future__ import annotations

import logging
from typing import Callable, Optional

import telebot

from telerun.application.services import (
    ChatContext,
    delete_run,
    edit_run,
    list_identities,
    list_runs,
    submit_run_for_user,
    tally,
)
from telerun.domain.errors import TelerunError
from telerun.domain.models import OwnerConstraint
from telerun.domain.repositories import IdentityRepository, RunRepository
from telerun.domain.results import MutationOutcome
from telerun.interfaces.telegram.commands import (
    ADD_USAGE,
    DELETE_USAGE,
    EDIT_USAGE,
    HELP_TEXT,
    LIST_USAGE,
    parse_add,
    parse_delete,
    parse_edit,
    parse_list,
)
from telerun.interfaces.telegram.presenter import (
    format_distance,
    list_runs_text,
    list_users_text,
    tally_text,
)

LOGGER = logging.getLogger(__name__)

FAILURE_TEXT = "Operation failed."


def _build_chat_context(message) -> Optional[ChatContext]:
    """
    Extract a channel-agnostic context object from a Telegram message.

    Returns None when the sender has no Telegram username, since runs are
    registered under that name.
    """

    user = message.from_user
    if user is None or not user.username:
        return None
    return ChatContext(
        chat_id=str(message.chat.id),
        external_user_id=str(user.id),
        display_name=user.username,
    )


def _owner_constraint(message) -> OwnerConstraint:
    """Edits and deletes are limited to runs submitted by the sender."""

    return OwnerConstraint(
        chat_id=str(message.chat.id),
        external_user_id=str(message.from_user.id),
    )


def create_telegram_bot(
    bot_token: str,
    identity_repo: IdentityRepository,
    run_repo: RunRepository,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing commands,
    building the chat context and rendering replies.
    """

    bot = telebot.TeleBot(bot_token)

    def reply(message, text: str) -> None:
        bot.send_message(message.chat.id, text)

    def run_safely(message, command: str, action: Callable[[], str]) -> None:
        # Store failures are reported generically; details go to the log only.
        try:
            text = action()
        except TelerunError:
            LOGGER.exception("/%s failed in chat %s", command, message.chat.id)
            text = FAILURE_TEXT
        reply(message, text)

    @bot.message_handler(commands=["start", "help"])
    def handle_help(message):
        reply(message, HELP_TEXT)

    @bot.message_handler(commands=["show"])
    def handle_show(message):
        run_safely(
            message,
            "show",
            lambda: list_users_text(list_identities(str(message.chat.id), identity_repo)),
        )

    @bot.message_handler(commands=["add"])
    def handle_add(message):
        try:
            distance = parse_add(message.text)
        except ValueError:
            reply(message, ADD_USAGE)
            return

        ctx = _build_chat_context(message)
        if ctx is None:
            reply(message, "Please set a Telegram username before adding runs.")
            return

        def action() -> str:
            submit_run_for_user(distance, ctx, identity_repo, run_repo)
            return f"{ctx.display_name} ran {format_distance(distance)}km added to database."

        run_safely(message, "add", action)

    @bot.message_handler(commands=["edit"])
    def handle_edit(message):
        try:
            run_id, distance = parse_edit(message.text)
        except ValueError:
            reply(message, EDIT_USAGE)
            return

        owner = _owner_constraint(message)

        def action() -> str:
            outcome = edit_run(run_id, distance, owner, run_repo)
            if outcome is MutationOutcome.NO_MATCH:
                return f"No run {run_id} owned by you."
            return f"Run {run_id} successfully updated with distance {format_distance(distance)}km."

        run_safely(message, "edit", action)

    @bot.message_handler(commands=["delete"])
    def handle_delete(message):
        try:
            run_id = parse_delete(message.text)
        except ValueError:
            reply(message, DELETE_USAGE)
            return

        owner = _owner_constraint(message)

        def action() -> str:
            outcome = delete_run(run_id, owner, run_repo)
            if outcome is MutationOutcome.NO_MATCH:
                return f"No run {run_id} owned by you."
            return f"Run {run_id} successfully deleted!"

        run_safely(message, "delete", action)

    @bot.message_handler(commands=["tally"])
    def handle_tally(message):
        run_safely(
            message,
            "tally",
            lambda: tally_text(tally(str(message.chat.id), identity_repo, run_repo)),
        )

    @bot.message_handler(commands=["list"])
    def handle_list(message):
        try:
            limit = parse_list(message.text)
        except ValueError:
            reply(message, LIST_USAGE)
            return

        run_safely(
            message,
            "list",
            lambda: list_runs_text(
                list_runs(str(message.chat.id), limit, identity_repo, run_repo)
            ),
        )

    return bot
