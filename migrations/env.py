# migrations/env.py
from logging.config import fileConfig
import logging
from urllib.parse import quote_plus

from sqlalchemy import engine_from_config, pool
from alembic import context

from agencydesk.models import Base
from agencydesk.store.db import DatabaseSettings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")
target_metadata = Base.metadata


def get_url() -> str:
    """SQLAlchemy URL built from the same MYSQL_URL / MYSQL* / DB_* precedence the app uses."""
    try:
        s = DatabaseSettings.from_env()
    except ValueError as e:
        # Final fallback: alembic.ini (local dev only)
        url = config.get_main_option("sqlalchemy.url") or ""
        if not url:
            raise
        logger.warning("Using sqlalchemy.url from alembic.ini: %s", e)
        return url
    return f"mysql+pymysql://{quote_plus(s.user)}:{quote_plus(s.password)}@{s.host}:{s.port}/{s.database}"


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
