import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    # Path to the SQLite file. DB_FILE overrides it; ':memory:' gives a
    # throwaway in-memory database. The factory derives SQLALCHEMY_DATABASE_URI
    # from this and creates the parent folder if it's missing.
    DATABASE_FILE = os.environ.get('DB_FILE') or \
        os.path.join(BASE_DIR, 'instance', 'campaign.db')

    # This disables a noisy tracking feature we don't need
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Port for `python run.py`
    PORT = int(os.environ.get('PORT', 3001))

    # Schema convergence runs on every start unless SKIP_MIGRATIONS=1
    AUTO_MIGRATE = os.environ.get('SKIP_MIGRATIONS') != '1'

    # Alembic revisions live next to this file, not inside the package
    MIGRATIONS_DIR = os.path.join(BASE_DIR, 'migrations')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Import wipes and rewrites every table, so it gets throttled
    IMPORT_RATE_LIMIT = os.environ.get('IMPORT_RATE_LIMIT', '10 per minute')
    RATELIMIT_ENABLED = True
