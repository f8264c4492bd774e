"""
Nyay Sahayak Application
========================
Flask application factory and main entry point.
"""
from flask import Flask
from flask_cors import CORS

from nyay_sahayak.config import config
from nyay_sahayak.storage.connection import get_database
from nyay_sahayak.api.routes import (
    create_sessions_blueprint,
    create_chat_blueprint,
    create_documents_blueprint,
    create_account_blueprint,
    create_learning_blueprint,
    create_health_blueprint,
    create_logs_blueprint
)
from nyay_sahayak.api.middleware import add_rate_limit_headers
from nyay_sahayak.utils.logging import get_logger, debug_print


def create_app(testing: bool = False) -> Flask:
    """
    Application factory for Flask app.

    Args:
        testing: If True, configure for testing

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Uploads are checked against the per-type limits; this only stops oversized bodies
    max_upload_mb = max(config.file.max_document_size_mb, config.file.max_audio_size_mb) + 1

    app.config.update(
        SECRET_KEY=config.server.secret_key,
        MAX_CONTENT_LENGTH=max_upload_mb * 1024 * 1024,
        JSON_SORT_KEYS=False,
        TESTING=testing
    )

    # CORS configuration
    cors_origins = config.server.cors_origins
    if testing:
        cors_origins = ['*']

    CORS(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        supports_credentials=True
    )

    # Initialize client storage
    if not testing:
        get_database()

    # Register blueprints
    app.register_blueprint(create_sessions_blueprint())
    app.register_blueprint(create_chat_blueprint())
    app.register_blueprint(create_documents_blueprint())
    app.register_blueprint(create_account_blueprint())
    app.register_blueprint(create_learning_blueprint())
    app.register_blueprint(create_health_blueprint())
    app.register_blueprint(create_logs_blueprint())

    # Add middleware
    app.after_request(add_rate_limit_headers)

    # Error handlers
    @app.errorhandler(400)
    def bad_request(e):
        return {'error': 'Bad request', 'details': str(e)}, 400

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Resource not found'}, 404

    @app.errorhandler(413)
    def file_too_large(e):
        return {'error': f'File too large. Maximum size is {max_upload_mb}MB'}, 413

    @app.errorhandler(429)
    def rate_limited(e):
        return {'error': 'Rate limit exceeded'}, 429

    @app.errorhandler(500)
    def internal_error(e):
        logger = get_logger().api_logger
        logger.error(f"Internal error: {e}")
        return {'error': 'Internal server error'}, 500

    # Log startup
    logger = get_logger()
    logger.api_logger.info(f"Nyay Sahayak started on {config.server.host}:{config.server.port}")

    if not config.gemini.is_configured:
        logger.app_logger.warning("GEMINI_API_KEY is not set; AI features will report an error")

    debug_print("Application initialized", 'INFO', 'APP')

    return app


def run_server():
    """Run the Flask development server."""
    app = create_app()

    print(f"""
+--------------------------------------------------------------+
|                   Nyay Sahayak API                           |
+--------------------------------------------------------------+
|  Server:   http://{config.server.host}:{config.server.port:<5}                              |
|  Model:    {config.gemini.text_model:<50}|
|  Bhashini: {config.bhashini.base_url:<50}|
+--------------------------------------------------------------+
    """)

    app.run(
        host=config.server.host,
        port=config.server.port,
        debug=config.server.debug,
        threaded=True
    )


if __name__ == '__main__':
    run_server()
