import unittest
from types import SimpleNamespace
from unittest import mock

from test_application_services import InMemoryIdentityRepository, InMemoryRunRepository

from telerun.domain.errors import StoreUnavailable
from telerun.interfaces.telegram.commands import ADD_USAGE, DELETE_USAGE, EDIT_USAGE, LIST_USAGE
from telerun.interfaces.telegram.handlers import (
    FAILURE_TEXT,
    _build_chat_context,
    _owner_constraint,
    create_telegram_bot,
)

BOT_TOKEN = "123456:TEST-TOKEN"


def _message(text="/help", username="alice", user_id=42, chat_id=-100):
    return SimpleNamespace(
        text=text,
        chat=SimpleNamespace(id=chat_id),
        from_user=SimpleNamespace(id=user_id, username=username),
    )


class UnavailableRunRepository(InMemoryRunRepository):
    def add_run(self, distance, user_id):
        raise StoreUnavailable("connection refused by db.internal:5432")

    def get_runs_for_users(self, user_ids, limit):
        raise StoreUnavailable("connection refused by db.internal:5432")


class ChatContextTests(unittest.TestCase):
    def test_context_from_message(self):
        ctx = _build_chat_context(_message())
        self.assertEqual(ctx.chat_id, "-100")
        self.assertEqual(ctx.external_user_id, "42")
        self.assertEqual(ctx.display_name, "alice")

    def test_sender_without_username_has_no_context(self):
        self.assertIsNone(_build_chat_context(_message(username=None)))

    def test_owner_constraint_uses_sender(self):
        owner = _owner_constraint(_message(user_id=7, chat_id=-5))
        self.assertEqual((owner.chat_id, owner.external_user_id), ("-5", "7"))


class TelegramHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.identity_repo = InMemoryIdentityRepository()
        self.run_repo = InMemoryRunRepository(self.identity_repo)
        self._build_bot(self.run_repo)

    def _build_bot(self, run_repo) -> None:
        self.bot = create_telegram_bot(BOT_TOKEN, self.identity_repo, run_repo)
        patcher = mock.patch.object(self.bot, "send_message")
        self.send_message = patcher.start()
        self.addCleanup(patcher.stop)

    def _dispatch(self, message) -> str:
        """Call the handler registered for the message's command; return the reply."""

        command = message.text.split()[0].lstrip("/").split("@")[0]
        for handler in self.bot.message_handlers:
            if command in (handler["filters"].get("commands") or []):
                self.send_message.reset_mock()
                handler["function"](message)
                self.send_message.assert_called_once()
                chat_id, text = self.send_message.call_args[0]
                self.assertEqual(chat_id, message.chat.id)
                return text
        self.fail(f"No handler registered for /{command}")

    def test_add_then_list_and_tally(self):
        reply = self._dispatch(_message("/add 10.12345678"))
        self.assertEqual(reply, "alice ran 10.12345678km added to database.")

        listing = self._dispatch(_message("/list 5"))
        self.assertIn(" 10.12345678 ", listing)

        standings = self._dispatch(_message("/tally"))
        self.assertIn("🥇 1. alice 1🏅 10.12345678km", standings)

    def test_show_without_users(self):
        self.assertEqual(self._dispatch(_message("/show")), "No users in database.")

    def test_add_without_username(self):
        reply = self._dispatch(_message("/add 5", username=None))
        self.assertIn("username", reply)
        self.assertEqual(self.run_repo.runs, {})

    def test_usage_replies_for_bad_arguments(self):
        cases = [
            ("/add five", ADD_USAGE),
            ("/edit 1", EDIT_USAGE),
            ("/delete 99999999999999999999", DELETE_USAGE),
            ("/list 99999999999999999999", LIST_USAGE),
        ]
        for text, usage in cases:
            with self.subTest(text=text):
                self.assertEqual(self._dispatch(_message(text)), usage)

    def test_edit_and_delete_of_someone_elses_run(self):
        self._dispatch(_message("/add 5"))
        (run_id,) = self.run_repo.runs

        intruder = dict(username="bob", user_id=7)
        self.assertEqual(
            self._dispatch(_message(f"/edit {run_id} 50", **intruder)),
            f"No run {run_id} owned by you.",
        )
        self.assertEqual(
            self._dispatch(_message(f"/delete {run_id}", **intruder)),
            f"No run {run_id} owned by you.",
        )
        self.assertEqual(self.run_repo.runs[run_id].distance, 5.0)

    def test_edit_and_delete_own_run(self):
        self._dispatch(_message("/add 5"))
        (run_id,) = self.run_repo.runs

        self.assertEqual(
            self._dispatch(_message(f"/edit {run_id} 6.5")),
            f"Run {run_id} successfully updated with distance 6.5km.",
        )
        self.assertEqual(
            self._dispatch(_message(f"/delete {run_id}")),
            f"Run {run_id} successfully deleted!",
        )
        self.assertEqual(self.run_repo.runs, {})

    def test_store_failure_gives_generic_reply(self):
        self._build_bot(UnavailableRunRepository(self.identity_repo))

        for text in ("/add 5", "/list 3"):
            with self.subTest(text=text):
                with self.assertLogs("telerun.interfaces.telegram.handlers", level="ERROR"):
                    reply = self._dispatch(_message(text))
                self.assertEqual(reply, FAILURE_TEXT)
                self.assertNotIn("db.internal", reply)


if __name__ == "__main__":
    unittest.main()
