# migrations/env.py
from __future__ import annotations
from logging.config import fileConfig
from alembic import context

# ----- Import the SQLAlchemy Base and models -----
from callbridge.config import Settings
from callbridge.services.db import Base, make_engine
# Import all models so Alembic "sees" their tables
from callbridge.models import Subaccount, User, CallLog  # noqa: F401

# ----- Alembic config -----
config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

# Same backend selection as the app (RENDER_DB_* / DATABASE_URL / SQLite)
settings = Settings.from_env()
sqlalchemy_url = settings.database_url
config.set_main_option("sqlalchemy.url", sqlalchemy_url.replace("%", "%%"))

target_metadata = Base.metadata

def run_migrations_offline():
    context.configure(
        url=sqlalchemy_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = make_engine(sqlalchemy_url, settings)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
