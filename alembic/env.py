import os
from dotenv import load_dotenv
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

# Base and all models must be imported so Base.metadata reflects every table
from maintenix.database import Base
from maintenix.auth import models as auth_models  # noqa

# Load .env file for general use (e.g., if Alembic CLI needs DATABASE_URL)
load_dotenv()

# This is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Set the metadata for 'autogenerate' support
target_metadata = Base.metadata


def get_database_url() -> str:
    """Get database URL and convert async URL to sync for Alembic"""
    current_sqlalchemy_url = config.get_main_option("sqlalchemy.url")

    if current_sqlalchemy_url:
        return current_sqlalchemy_url

    env_db_url = os.getenv("DATABASE_URL")
    if not env_db_url:
        raise ValueError(
            "DATABASE_URL not found in environment variables and "
            "sqlalchemy.url not set in alembic.ini."
        )

    # Convert async drivers to their sync counterparts
    if "+asyncpg" in env_db_url:
        return env_db_url.replace("+asyncpg", "")
    if "+aiosqlite" in env_db_url:
        return env_db_url.replace("+aiosqlite", "")
    if env_db_url.startswith(("postgresql://", "sqlite://")):
        return env_db_url

    raise ValueError(
        f"DATABASE_URL format not recognized for sync conversion: {env_db_url}"
    )


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = get_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    config.set_main_option("sqlalchemy.url", get_database_url())

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
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
