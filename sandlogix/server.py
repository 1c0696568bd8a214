import logging
import os
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter.errors import RateLimitExceeded
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file
load_dotenv()

from sandlogix.config import get_config
from sandlogix.extensions import db, limiter
from sandlogix.utils.request_logger import RequestLogger

logger = logging.getLogger(__name__)


def setup_logging(app):
    logs_dir = app.config['LOGS_DIR']
    os.makedirs(logs_dir, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(logs_dir, 'app.log')),
            logging.StreamHandler()
        ]
    )


def _ensure_sqlite_folder(uri):
    if uri.startswith('sqlite:///') and ':memory:' not in uri:
        folder = os.path.dirname(uri[len('sqlite:///'):])
        if folder:
            os.makedirs(folder, exist_ok=True)


def register_blueprints(app):
    from sandlogix.api.delivery import delivery_bp
    from sandlogix.api.payment import payment_bp
    from sandlogix.api.reports import reports_bp
    from sandlogix.api.settings import settings_bp

    for blueprint in (delivery_bp, payment_bp, reports_bp, settings_bp):
        app.register_blueprint(blueprint, url_prefix='/api')


def register_request_hooks(app):
    @app.before_request
    def log_request_info():
        logger.debug(f"Request: {request.method} {request.url}")
        if request.is_json and request.content_length:
            logger.debug(f"JSON data: {request.get_json(silent=True)}")

    @app.after_request
    def log_response_info(response):
        logger.debug(f"Response: {response.status_code}")
        if response.status_code >= 400:
            logger.error(f"Error response: {response.status_code} for {request.method} {request.url}")
            if response.is_json:
                logger.error(f"Response data: {response.get_json()}")
        return response


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(error):
        logger.error(f"400 Bad Request for {request.method} {request.url}: {error}")
        return jsonify({
            'error': 'Bad Request',
            'message': str(error),
            'path': request.path
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        logger.error(f"404 error for path: {request.path}")
        if request.path.startswith('/api/'):
            return jsonify({'error': 'API endpoint not found', 'path': request.path}), 404
        return jsonify({'error': 'Page not found', 'path': request.path}), 404

    @app.errorhandler(RateLimitExceeded)
    def ratelimit_handler(e):
        logger.warning(f"Rate limit exceeded for {request.method} {request.url}")
        return jsonify({'error': 'Rate limit exceeded. Please try again later.'}), 429

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({'error': e.name, 'message': e.description}), e.code
        logger.error(f"Unhandled exception for {request.method} {request.url}: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config_class=None):
    """Application factory. Defaults to the config selected by SANDLOGIX_ENV."""
    app = Flask(__name__)
    app.config.from_object(config_class or get_config())
    app.json.sort_keys = False

    setup_logging(app)
    logger.info("Database connected: %s",
                "sqlite" if "sqlite" in app.config.get("SQLALCHEMY_DATABASE_URI", "") else "non-sqlite")

    _ensure_sqlite_folder(app.config['SQLALCHEMY_DATABASE_URI'])
    db.init_app(app)
    limiter.init_app(app)
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    if app.config.get('REQUEST_METRICS_ENABLED'):
        RequestLogger.init_app(app)

    register_request_hooks(app)
    register_blueprints(app)
    register_error_handlers(app)

    @app.route('/')
    def root():
        return {'status': 'ok', 'message': 'SandLogix Backend API is running. Available endpoints: /api/*'}

    @app.route('/api/health-check')
    @limiter.exempt
    def health_check():
        if db.health_check():
            return {'status': 'ok', 'database': 'ok'}
        return jsonify({'status': 'error', 'database': 'unavailable'}), 503

    @app.cli.command('init-db')
    def init_db():
        """Create any missing tables."""
        db.create_all()
        logger.info("Database tables created")

    with app.app_context():
        # Models must be imported before create_all so their tables are registered
        from sandlogix.models.app_settings import AppSettings  # noqa: F401
        from sandlogix.models.delivery import Delivery, Payment  # noqa: F401
        db.create_all()

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host=app.config.get('FLASK_HOST', '::'), port=app.config.get('FLASK_PORT', 5000),
            debug=app.config.get('DEBUG', False))
