"""
FormForge Application

Form block validation and submission identifiers for a forms platform.

Provides:
- Single-pass validation of form block lists (core, type, payment, logic)
- UUID / legacy Hashid submission identifiers
- Payment amount resolution from field references
- Audit logging
"""

import os
from datetime import datetime
from flask import Flask, request, g, jsonify
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

# Initialize extensions
db = SQLAlchemy()


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


def create_app(test_config=None):
    """Application factory pattern."""
    app = Flask(__name__, instance_relative_config=True)

    # Default configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL', 'sqlite:///formforge.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        APP_URL=os.environ.get('APP_URL', 'http://localhost:3000'),

        # Payment blocks are only available on the hosted version
        SELF_HOSTED=_env_flag('SELF_HOSTED'),

        # Legacy submission identifiers
        HASHIDS_SALT=os.environ.get('HASHIDS_SALT', ''),
        HASHIDS_MIN_LENGTH=int(os.environ.get('HASHIDS_MIN_LENGTH', 0)),

        # Reference data overrides (defaults ship in formforge/data)
        STRIPE_CURRENCIES_PATH=os.environ.get('STRIPE_CURRENCIES_PATH', ''),
        CONDITION_MAPPING_PATH=os.environ.get('CONDITION_MAPPING_PATH', ''),

        # Rate limiting settings
        RATELIMIT_ENABLED=_env_flag('RATELIMIT_ENABLED', 'true'),
        RATELIMIT_STORAGE_URI=os.environ.get('REDIS_URL', 'memory://'),
        RATELIMIT_STRATEGY='fixed-window',
        RATELIMIT_HEADERS_ENABLED=True,
    )

    if test_config is None:
        # Load instance config if it exists
        app.config.from_pyfile('config.py', silent=True)
    else:
        # Load test config
        app.config.from_mapping(test_config)

    # Initialize extensions with app
    db.init_app(app)

    # Import after db init to avoid circular imports
    from formforge.security import add_security_headers, init_security
    init_security(app)

    from formforge.routes import api_bp
    app.register_blueprint(api_bp)

    @app.after_request
    def after_request(response):
        """Add security headers to all responses."""
        return add_security_headers(response)

    # Request logging
    @app.before_request
    def before_request():
        g.request_start_time = datetime.utcnow()

    @app.after_request
    def log_request(response):
        if hasattr(g, 'request_start_time'):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'{request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    with app.app_context():
        from formforge import models  # noqa: F401 - register tables
        db.create_all()

    # Error handlers
    @app.errorhandler(HTTPException)
    def http_error(error):
        """Render HTTP errors as JSON."""
        return jsonify({'ok': False, 'message': error.description}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal error: {str(error)}')
        return jsonify({'ok': False, 'message': 'Internal server error'}), 500

    return app
