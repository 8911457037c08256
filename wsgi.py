import os

from geotrack.server.app import create_app, db
from geotrack.server import models  # noqa: F401

app = create_app(os.environ.get('FLASK_ENV', 'production'))

with app.app_context():
    # SQLite fallback has no migration step; make sure the table exists
    db.create_all()


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', '5000')))
