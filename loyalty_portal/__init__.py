"""
Loyalty Portal
Flask application factory
"""
import os
import re
import logging
from flask import Flask
from flask_cors import CORS

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.cache import init_cache
from .utils import errors as api_errors
from .utils.exceptions import PortalError
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Logging before anything that logs
    setup_logging(app.config.get('LOG_LEVEL'), app.config.get('LOG_FORMAT'))
    validate_config(config_name)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Exchange rate cache (Redis with in-memory fallback)
    init_cache(app)

    # Portal frontend origins
    cors_origins = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    if app.config.get('SITE_URL'):
        cors_origins.append(app.config['SITE_URL'].rstrip('/'))
    if config_name != 'production':
        cors_origins.append(re.compile(r'https://.*\.vercel\.app'))
    CORS(app, origins=cors_origins, supports_credentials=True,
         allow_headers=['Content-Type', 'Authorization', app.config['CLIENT_AUTH_HEADER']])

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'loyalty-portal'}

    logger.info('Loyalty portal created (%s)', config_name)
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.points import points_bp
    from .api.trips import trips_bp
    from .api.currency import currency_bp
    from .api.referrals import referrals_bp
    from .api.profile import profile_bp

    app.register_blueprint(points_bp, url_prefix='/api/points')
    app.register_blueprint(trips_bp, url_prefix='/api/trips')
    app.register_blueprint(currency_bp, url_prefix='/api/currency')
    app.register_blueprint(referrals_bp, url_prefix='/api/referrals')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(PortalError)
    def portal_error(error):
        return api_errors.error_response(
            error.message,
            error.code,
            error.status_code,
            log_error=error.status_code >= 500
        )

    @app.errorhandler(400)
    def bad_request(error):
        return api_errors.bad_request('Bad request')

    @app.errorhandler(404)
    def not_found(error):
        return api_errors.not_found('Not found')

    @app.errorhandler(500)
    def internal_error(error):
        return api_errors.internal_error('Internal server error')
