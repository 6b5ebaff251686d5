"""Development server: python run.py

Settings come from the environment (or a .env file next to this one):
DB_FILE, PORT, LOG_LEVEL, SKIP_MIGRATIONS. The database is brought up to
date while the app is built, before the server accepts requests.
"""
import os

from dotenv import load_dotenv
load_dotenv()

from adventure_diary import create_app

app = create_app()

if __name__ == '__main__':
    # Auto-reload and the interactive debugger are for local work only
    debug = os.environ.get('FLASK_DEBUG') == '1'
    app.run(debug=debug, host='0.0.0.0', port=app.config['PORT'])
