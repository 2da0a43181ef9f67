"""
API Route Handlers for Trash Rush.

Health, wake and read-only operator endpoints. The wake endpoint exists so
the hosting platform sees traffic and keeps the process running.
"""

import logging
import time
from flask import jsonify, request

logger = logging.getLogger(__name__)


def register_api_handlers(app, registry, directory, activity_monitor):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        registry: SessionRegistry instance
        directory: ConnectionDirectory instance
        activity_monitor: ActivityMonitor refreshed by wake calls
    """

    @app.route('/health')
    def health():
        """Plain-text liveness check."""
        return 'OK', 200, {'Content-Type': 'text/plain'}

    @app.route('/wake', methods=['POST'])
    def wake():
        """Wake call from a client; reports the one-way latency it observed."""
        logger.info("Received wake call from client")
        now = activity_monitor.touch()

        data = request.get_json(silent=True) or {}
        timestamp = data.get('timestamp')
        ping = None
        try:
            ping = int(now * 1000) - int(timestamp)
        except (TypeError, ValueError):
            pass

        return jsonify({
            'status': 'awake',
            'ping': ping,
            'message': 'Server is active and responding'
        })

    @app.route('/api/health')
    def health_check():
        """Health check endpoint with live counts."""
        return jsonify({
            'status': 'healthy',
            'message': 'Trash Rush game server is running',
            'idle_seconds': round(activity_monitor.idle_seconds(), 1),
            'sessions': registry.get_status(),
            'connections': directory.get_connection_stats(),
            'timestamp': int(time.time() * 1000)
        })

    @app.route('/api/sessions')
    def list_sessions():
        """Read-only list of live sessions."""
        return jsonify({
            **registry.get_status(),
            'sessions': registry.list_sessions()
        })

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        return jsonify({'error': 'Internal server error'}), 500

    logger.info("API handlers registered successfully")
