from flask import Flask, jsonify, request
from models import db
from routes import main_bp, catalog_bp, schedules_bp, upload_bp


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object('config')
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize database
    db.init_app(app)

    # Register blueprints
    app.register_blueprint(main_bp, url_prefix='/api')
    app.register_blueprint(catalog_bp, url_prefix='/api/programs')
    app.register_blueprint(schedules_bp, url_prefix='/api/schedules')
    app.register_blueprint(upload_bp, url_prefix='/api/upload')

    @app.after_request
    def add_header(response):
        """Log the request and prevent caching."""
        app.logger.info('%s %s -> %s', request.method, request.path, response.status_code)
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        return response

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({'error': 'Uploaded file is too large'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f'Unhandled error: {error}')
        return jsonify({'error': 'Internal server error'}), 500

    # Create tables
    with app.app_context():
        db.create_all()

    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=True, port=5000)
