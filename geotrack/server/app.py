import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS


db = SQLAlchemy()
migrate = Migrate()


def _configure_logging(app: Flask) -> None:
    formatter = logging.Formatter('[%(asctime)s] %(levelname)s in %(module)s: %(message)s')

    if app.config.get('LOG_TO_FILE', True):
        log_dir = os.path.join(app.root_path, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, 'geotrack.log')

        file_handler = RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        app.logger.addHandler(file_handler)

    if app.debug:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        app.logger.addHandler(console_handler)

    app.logger.setLevel(logging.INFO)


def _register_error_handlers(app: Flask) -> None:
    def api_error(status_code: int, message: str):
        return jsonify({"error": message, "status": status_code}), status_code

    @app.errorhandler(400)
    def bad_request(error):  # type: ignore
        return api_error(400, 'Bad Request')

    @app.errorhandler(404)
    def not_found(error):  # type: ignore
        return api_error(404, 'Not Found')

    @app.errorhandler(405)
    def method_not_allowed(error):  # type: ignore
        return api_error(405, 'Method Not Allowed')

    @app.errorhandler(413)
    def payload_too_large(error):  # type: ignore
        return api_error(413, 'Payload Too Large')

    @app.errorhandler(500)
    def server_error(error):  # type: ignore
        app.logger.error('Unhandled error: %s', error)
        return api_error(500, 'Internal Server Error')


def create_app(config_name: str = 'development') -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    from .config import config as config_map  # type: ignore
    app.config.from_object(config_map.get(config_name, config_map['default']))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}})

    # Blueprints
    from .routes.api import api_bp  # type: ignore
    app.register_blueprint(api_bp)

    # Logging and errors
    _configure_logging(app)
    _register_error_handlers(app)

    return app


if __name__ == '__main__':
    env = os.environ.get('FLASK_ENV', 'development')
    app = create_app(env if env in ('development', 'production', 'testing') else 'development')
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', '5000')), debug=app.debug)
