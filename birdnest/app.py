"""
Birdnest Flask Application.

Main entry point for the web application. Initializes:
- Violation monitor (background polling of the drone feed)
- API routes

Usage:
    python -m birdnest.app

Or with gunicorn (single worker, the monitor lives in-process):
    gunicorn -w 1 'birdnest.app:create_app()'
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from birdnest.api import violations_bp
from birdnest.config import config
from birdnest.ingestion import ViolationMonitor

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    monitor: Optional[ViolationMonitor] = None,
    start_monitor: bool = True,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        monitor: Violation monitor to serve (created from config if None)
        start_monitor: Whether to start background polling.
                       Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Violation list is public, any origin may read it
    CORS(app, resources={r'/api/*': {'origins': '*'}}, send_wildcard=True)

    app.register_blueprint(violations_bp)

    if monitor is None:
        monitor = ViolationMonitor()
    app.config['VIOLATION_MONITOR'] = monitor

    if start_monitor:
        monitor.start_background()

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting Birdnest NDZ monitor on http://localhost:{config.port}')
    logger.info(f'Violations: http://localhost:{config.port}/api/ndz-violations')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second monitor thread
    )


if __name__ == '__main__':
    run_development_server()
