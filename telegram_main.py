import logging

from telerun.config import Settings, load_settings
from telerun.infrastructure.db.identity_repository_postgres import PostgresIdentityRepository
from telerun.infrastructure.db.identity_repository_sqlite import SqliteIdentityRepository
from telerun.infrastructure.db.postgres import create_pool
from telerun.infrastructure.db.run_repository_postgres import PostgresRunRepository
from telerun.infrastructure.db.run_repository_sqlite import SqliteRunRepository
from telerun.infrastructure.db.sqlite import SqliteDatabase
from telerun.interfaces.telegram.handlers import create_telegram_bot

LOGGER = logging.getLogger(__name__)


def build_repositories(settings: Settings):
    """Create the identity and run repositories for the configured backend."""

    if settings.uses_postgres:
        pool = create_pool(settings.database_url, settings.db_pool_min, settings.db_pool_max)
        identity_repo = PostgresIdentityRepository(pool)
        run_repo = PostgresRunRepository(pool)
        LOGGER.info("Using Postgres store")
    else:
        db = SqliteDatabase(settings.db_path)
        identity_repo = SqliteIdentityRepository(db)
        run_repo = SqliteRunRepository(db)
        LOGGER.info("Using SQLite store at %s", settings.db_path)
    return identity_repo, run_repo


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    identity_repo, run_repo = build_repositories(settings)

    bot = create_telegram_bot(settings.telegram_bot_token, identity_repo, run_repo)
    LOGGER.info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()
