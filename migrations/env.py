"""Alembic environment bound to the Flask app's database."""

from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

from intake import create_app, db

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _app():
    return current_app._get_current_object() if has_app_context() else create_app()


def run_migrations_offline():
    """Emit SQL to stdout without a live connection."""
    app = _app()
    context.configure(
        url=app.config["SQLALCHEMY_DATABASE_URI"],
        target_metadata=db.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    app = _app()
    with app.app_context():
        with db.engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=db.metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
