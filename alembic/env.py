"""
Alembic environment — migrations run against leadrank's own engine.
"""
from logging.config import fileConfig

from alembic import context

from leadrank.database import engine, init_models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = init_models()


def run_migrations_offline() -> None:
    context.configure(
        url=str(engine.url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
