import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

# Loggers that write through the app's console handler. Alembic reports each
# revision it applies at INFO, which is worth seeing at startup.
APP_LOGGERS = ('adventure_diary', 'alembic')


def configure_logging(app):
    """Attach a console handler to the package and migration loggers.

    Flask's own app.logger is left alone. Safe to call once per app
    instance: the handler is only added the first time.
    """
    level = app.config.get('LOG_LEVEL', 'INFO')
    handler = None
    for name in APP_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if any(getattr(h, '_adventure_diary', False) for h in logger.handlers):
            continue
        if handler is None:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._adventure_diary = True
        logger.addHandler(handler)

    # SQL echo stays off unless someone asks for DEBUG explicitly
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    return logging.getLogger('adventure_diary')
