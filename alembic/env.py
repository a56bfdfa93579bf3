from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from orus_builder.core.config import settings
from orus_builder.db.session import Base
from orus_builder.db import models  # noqa

config = context.config
# alembic.ini carries no logging sections; the app configures logging itself
if config.config_file_name:
    try:
        fileConfig(config.config_file_name)
    except (KeyError, ValueError):
        pass
target_metadata = Base.metadata

def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")

def run_migrations_offline():
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=_is_sqlite(settings.database_url),
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    configuration = {"sqlalchemy.url": settings.database_url}
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=_is_sqlite(settings.database_url),
        )
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
