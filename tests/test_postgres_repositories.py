import os
import unittest
import uuid

from telerun.application.services import (
    ChatContext,
    edit_run,
    list_runs,
    resolve_or_create_identity,
    submit_run_for_user,
    tally,
)
from telerun.domain.results import NO_DATA, MutationOutcome

DATABASE_URL = os.environ.get("TELERUN_TEST_DATABASE_URL")


@unittest.skipUnless(DATABASE_URL, "TELERUN_TEST_DATABASE_URL is not set")
class PostgresRepositoryTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        from telerun.infrastructure.db.identity_repository_postgres import (
            PostgresIdentityRepository,
        )
        from telerun.infrastructure.db.postgres import create_pool
        from telerun.infrastructure.db.run_repository_postgres import PostgresRunRepository

        cls.pool = create_pool(DATABASE_URL, 1, 4)
        cls.identity_repo = PostgresIdentityRepository(cls.pool)
        cls.run_repo = PostgresRunRepository(cls.pool)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.pool.closeall()

    def setUp(self) -> None:
        # A fresh chat per test keeps tests independent without truncating tables.
        self.chat_id = f"test-{uuid.uuid4()}"
        self.alice = ChatContext(self.chat_id, "1", "alice")
        self.bob = ChatContext(self.chat_id, "2", "bob")

    def test_resolve_is_idempotent(self):
        first = resolve_or_create_identity(self.alice, self.identity_repo)
        second = resolve_or_create_identity(self.alice, self.identity_repo)
        self.assertEqual(first.id, second.id)

    def test_list_runs_and_round_trip(self):
        self.assertIs(list_runs(self.chat_id, 5, self.identity_repo, self.run_repo), NO_DATA)
        submit_run_for_user(5.3, self.alice, self.identity_repo, self.run_repo)
        (run,) = list_runs(self.chat_id, 5, self.identity_repo, self.run_repo)
        self.assertEqual(run.distance, 5.3)

    def test_edit_is_owner_gated(self):
        run_id = submit_run_for_user(5.0, self.alice, self.identity_repo, self.run_repo)
        submit_run_for_user(1.0, self.bob, self.identity_repo, self.run_repo)
        outcome = edit_run(run_id, 9.0, self.bob.owner_constraint(), self.run_repo)
        self.assertIs(outcome, MutationOutcome.NO_MATCH)
        outcome = edit_run(run_id, 9.0, self.alice.owner_constraint(), self.run_repo)
        self.assertIs(outcome, MutationOutcome.APPLIED)

    def test_tally(self):
        submit_run_for_user(5.0, self.alice, self.identity_repo, self.run_repo)
        submit_run_for_user(3.0, self.alice, self.identity_repo, self.run_repo)
        submit_run_for_user(10.0, self.bob, self.identity_repo, self.run_repo)
        result = tally(self.chat_id, self.identity_repo, self.run_repo)
        self.assertEqual(
            [(s.display_name, s.medals, s.distance) for s in result],
            [("bob", 1, 10.0), ("alice", 2, 8.0)],
        )


if __name__ == "__main__":
    unittest.main()
