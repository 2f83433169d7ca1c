import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from models import db
from models.database import init_app as init_db
from routes import main_bp, auth_bp, register_bp, portal_bp, admin_bp, notifications_bp, files_bp
from routes.auth import init_oauth
from utils.file_storage import init_storage


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object('config')
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize database
    init_db(app)

    # Initialize OAuth
    init_oauth(app)

    # Document storage
    init_storage(app)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(register_bp, url_prefix='/api/register')
    app.register_blueprint(portal_bp, url_prefix='/api/portal')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(files_bp, url_prefix=app.config['STORAGE_PUBLIC_URL'])

    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(413)
    def json_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        return jsonify({'error': str(error)}), 500

    @app.after_request
    def add_header(response):
        """Add headers to prevent caching."""
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        return response

    # Create tables
    with app.app_context():
        db.create_all()

    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'], port=5000)
