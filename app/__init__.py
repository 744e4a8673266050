"""
Flask Application Factory
"""

import os
import logging

import click
from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException

from config import config
from extensions import db, migrate, jwt, bcrypt, cors, limiter
from app.errors import ApiError


def create_app(config_name=None, overrides=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })
    limiter.init_app(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)
    register_jwt_handlers(app)
    register_commands(app)

    # Create database tables and seed defaults
    with app.app_context():
        from app import models  # noqa: F401  (register tables)
        db.create_all()
        if app.config.get('SEED_DEFAULTS'):
            from app.bootstrap import ensure_seed_data
            ensure_seed_data(db.session, app.config)

    return app


def register_blueprints(app):
    """Register Flask blueprints"""
    from app.api.auth import auth_bp
    from app.api.users import users_bp
    from app.api.complaints import complaints_bp
    from app.api.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(complaints_bp, url_prefix='/api/complaints')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    # Health check endpoint
    @app.route('/health')
    @app.route('/api/health')
    def health_check():
        return jsonify({'status': 'healthy', 'message': 'API is running'}), 200

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Municipal Complaint Tracker API',
            'version': '1.0.0',
            'endpoints': {
                'auth': '/api/auth',
                'users': '/api/users',
                'complaints': '/api/complaints',
                'admin': '/api/admin'
            }
        }), 200

    @app.route(f"{app.config.get('UPLOAD_URL_PREFIX', '/uploads')}/<path:filename>")
    def uploaded_file(filename):
        """Serve stored complaint images"""
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(ApiError)
    def api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Route not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def too_large(error):
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return jsonify({'error': f'File too large. Maximum size is {limit_mb}MB'}), 413

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': 'Too many requests'}), 429

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        db.session.rollback()
        app.logger.exception(f'Unhandled exception: {str(error)}')
        return jsonify({'error': 'Internal Server Error'}), 500


def register_jwt_handlers(app):
    """JSON bodies for token failures raised by flask_jwt_extended"""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Access token required'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': 'Invalid token'}), 403

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Token expired'}), 403


def register_commands(app):
    """CLI commands"""

    @app.cli.command('seed')
    def seed():
        """Create the default admin and departments if missing"""
        from app.bootstrap import ensure_seed_data
        admin, departments = ensure_seed_data(db.session, app.config)
        click.echo(f"Admin created: {'yes' if admin else 'no (exists)'}")
        click.echo(f'Departments created: {len(departments)}')
