from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from cityvizor_migrate.config import get_settings
from cityvizor_migrate.infrastructure.db import models  # noqa: F401  (registers tables)
from cityvizor_migrate.infrastructure.db.session import Base

config = context.config
config.set_main_option("sqlalchemy.url", get_settings().get_sqlalchemy_url())

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        include_schemas=True,
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
        context.configure(connection=connection, target_metadata=target_metadata, include_schemas=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
