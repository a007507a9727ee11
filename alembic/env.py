# alembic/env.py
# isort: skip_file
# ruff: noqa: E402
"""
Alembic environment for the BreakEven schema.

- The database URL comes from breakeven.config (DATABASE_URL / .env), not
  from alembic.ini, so the app and its migrations always agree.
- breakeven.models is imported so SQLModel.metadata holds every table
  (user, budget, budget_rate, expense, day_ledger, subscription).

Usage:
  alembic upgrade head
  alembic revision -m "..." --autogenerate
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

# alembic runs from the repo root, but be explicit so `import breakeven` works
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from breakeven.config import get_settings
import breakeven.models  # noqa: F401  # registers tables on SQLModel.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata
database_url = get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)


def _configure_kwargs() -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,  # pick up column type changes on autogenerate
        # SQLite cannot ALTER most things in place; batch mode copies the table
        "render_as_batch": database_url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
