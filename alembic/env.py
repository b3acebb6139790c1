"""
Alembic env for the listings schema (users, listings, sessions).
The app talks to the database through async drivers; migrations use the sync ones.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from listings_web.config import get_settings
from listings_web.db.base import Base
from listings_web.db.models import Listing, SessionRecord, User  # noqa: F401 - ensure models are registered

SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql+psycopg2",
    "sqlite+aiosqlite": "sqlite",
}

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def sync_database_url(url: str) -> str:
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        if url.startswith(async_driver):
            return sync_driver + url[len(async_driver):]
    return url


database_url = sync_database_url(get_settings().database_url)
config.set_main_option("sqlalchemy.url", database_url)

# SQLite cannot ALTER most columns in place
render_as_batch = database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL only."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
