import logging
import os
import sys

from flask import Flask, jsonify
from flask.logging import default_handler
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from .extensions import db
from .config import DevConfig, ProdConfig
from .services.errors import BackfillError, PersistenceError, ServiceError

_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.setFormatter(logging.Formatter(
    '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
))


def _configure_logging(app):
    """Set up structured logging for production.

    Every app in the process shares the package logger, so the stdout
    handler is attached once.
    """
    level = logging.INFO if not app.debug else logging.DEBUG
    app.logger.setLevel(level)
    app.logger.removeHandler(default_handler)
    if _log_handler not in app.logger.handlers:
        app.logger.addHandler(_log_handler)
    logging.getLogger('gunicorn.error').setLevel(level)


def _ensure_schema(app):
    """Create missing tables and add the api_key column to old users tables.

    Deployments that predate API keys have a users table without the
    column; the startup backfill then issues keys for those rows.
    """
    with app.app_context():
        db.create_all()

        columns = {c['name'] for c in inspect(db.engine).get_columns('users')}
        if 'api_key' in columns:
            return

        try:
            db.session.execute(db.text(
                'ALTER TABLE users ADD COLUMN api_key VARCHAR(64)'
            ))
            db.session.execute(db.text(
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_users_api_key ON users (api_key)'
            ))
            db.session.commit()
            app.logger.info('Added api_key column to users')
        except SQLAlchemyError as e:
            db.session.rollback()
            app.logger.warning('Schema migration check failed: %s', e)


def _backfill_api_keys(app):
    """Issue keys to accounts created before key auth existed."""
    from .services.accounts import backfill_missing_keys

    with app.app_context():
        try:
            count = backfill_missing_keys(db.session)
        except BackfillError as e:
            app.logger.warning(
                'Could not update existing users with API keys: %s', e
            )
        except PersistenceError as e:
            app.logger.warning('API key backfill skipped: %s', e)
        else:
            app.logger.info('API key backfill complete (%d users updated)', count)


def _register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        # Domain errors are handled in the views; anything reaching here
        # is an internal failure.
        app.logger.exception('Unhandled service error: %s', e)
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(500)
    def handle_internal_error(e):
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config=None):
    app = Flask(__name__, static_folder=None)

    if config is None:
        config = ProdConfig if os.environ.get('FLASK_ENV') == 'production' else DevConfig
    app.config.from_object(config)

    _configure_logging(app)

    # Import models so they are registered with SQLAlchemy
    from . import models  # noqa: F401

    db.init_app(app)

    _ensure_schema(app)
    if app.config.get('BACKFILL_API_KEYS_ON_STARTUP'):
        _backfill_api_keys(app)

    from flask_cors import CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))

    from .api import register_blueprints
    register_blueprints(app)
    _register_error_handlers(app)

    from .cli import register_commands
    register_commands(app)

    # Health check endpoint
    @app.route('/healthz')
    def health_check():
        try:
            db.session.execute(db.text('SELECT 1'))
            return jsonify(status='healthy'), 200
        except Exception:
            app.logger.exception('Health check failed')
            return jsonify(status='unhealthy'), 503

    return app
