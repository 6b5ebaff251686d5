import logging

import sqlalchemy as sa
from flask import current_app

from alembic import context

config = context.config
logger = logging.getLogger('alembic.env')

# Every applied, reverted or stamped revision gets a row here, next to
# alembic_version (which only ever holds the current head).
MIGRATION_LOG_DDL = """
CREATE TABLE IF NOT EXISTS migration_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    revision TEXT NOT NULL,
    direction TEXT NOT NULL,
    applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def get_engine():
    return current_app.extensions['migrate'].db.engine


def get_engine_url():
    return get_engine().url.render_as_string(hide_password=False).replace('%', '%%')


config.set_main_option('sqlalchemy.url', get_engine_url())
target_db = current_app.extensions['migrate'].db


def get_metadata():
    if hasattr(target_db, 'metadatas'):
        return target_db.metadatas[None]
    return target_db.metadata


def _record_step(ctx, step, heads, run_args):
    if step.is_stamp:
        direction = 'stamp'
    elif step.is_upgrade:
        direction = 'upgrade'
    else:
        direction = 'downgrade'
    revision = ', '.join(step.up_revision_ids) or 'base'
    ctx.connection.execute(
        sa.text('INSERT INTO migration_log (revision, direction) VALUES (:rev, :direction)'),
        {'rev': revision, 'direction': direction})
    logger.info('Recorded %s of %s', direction, revision)


def run_migrations_offline():
    """Emit SQL to stdout instead of running it (flask db upgrade --sql)."""
    url = config.get_main_option('sqlalchemy.url')
    context.configure(url=url, target_metadata=get_metadata(), literal_binds=True)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run the revisions against the app's database.

    Foreign key enforcement is switched off for the whole run: the legacy
    table rebuilds drop and rename tables that other tables reference. It
    can only be changed outside a transaction, hence the explicit commits.
    Each revision then runs in its own transaction (SQLite DDL is not
    transactional as far as Alembic is concerned).
    """

    # this callback is used to prevent an auto-migration from being generated
    # when there are no changes to the schema
    def process_revision_directives(context, revision, directives):
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info('No changes in schema detected.')

    conf_args = dict(current_app.extensions['migrate'].configure_args)
    if conf_args.get('process_revision_directives') is None:
        conf_args['process_revision_directives'] = process_revision_directives
    conf_args['on_version_apply'] = _record_step

    connectable = get_engine()

    with connectable.connect() as connection:
        connection.exec_driver_sql('PRAGMA foreign_keys=OFF')
        connection.exec_driver_sql(MIGRATION_LOG_DDL)
        connection.commit()
        try:
            context.configure(
                connection=connection,
                target_metadata=get_metadata(),
                **conf_args
            )

            with context.begin_transaction():
                context.run_migrations()
        finally:
            connection.rollback()
            connection.exec_driver_sql('PRAGMA foreign_keys=ON')
            connection.commit()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
