from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

# .env in apps/api/ must be loaded before settings are read
load_dotenv()

from shiftdesk.core.config import settings  # noqa: E402
from shiftdesk.core.database import Base  # noqa: E402

# every model module must be imported so autogenerate sees its table
from shiftdesk.models.staff import StaffMember  # noqa: F401,E402
from shiftdesk.models.shift import Shift  # noqa: F401,E402
from shiftdesk.models.time_off import TimeOffRequest  # noqa: F401,E402

config = context.config

# taken from DATABASE_URL rather than alembic.ini (avoids ini interpolation of %)
config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
