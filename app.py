"""
Trash Rush - real-time party game server

Flask-SocketIO backend that matches players into small sessions, runs the
countdown and timed rounds, and reports the final ranking. App.py is pure
server setup and handler registration; the session logic lives in lobby/
and game/.
"""

import logging
from typing import Optional
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Settings
from lobby import SessionRegistry, ConnectionDirectory, Matchmaker
from game import SessionLifecycle, TimerScheduler, SocketIOBroadcaster
from handlers import register_socket_handlers, register_api_handlers
from utils.keepalive import ActivityMonitor, KeepAlivePinger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_class=Settings, scheduler: Optional[TimerScheduler] = None):
    """
    Application factory that creates and configures the Flask app.

    Args:
        config_class: Settings class to load
        scheduler: Optional timer scheduler, defaults to Socket.IO background tasks

    Returns:
        Configured Flask app with SocketIO
    """

    # Flask configuration
    app = Flask(__name__)
    app.config.from_object(config_class)

    # CORS configuration for the browser client
    origins = config_class.cors_origins()
    CORS(app, origins=origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # SocketIO configuration
    socketio = SocketIO(
        app,
        cors_allowed_origins=origins,
        async_mode=app.config['ASYNC_MODE'],
        ping_timeout=60,
        ping_interval=25
    )

    # Initialize session managers
    logger.info("Initializing session managers...")

    registry = SessionRegistry(
        max_age_minutes=app.config['SESSION_MAX_AGE_MINUTES'],
        max_players=app.config['MAX_PLAYERS'],
        min_players=app.config['MIN_PLAYERS'],
        max_rounds=app.config['MAX_ROUNDS']
    )
    directory = ConnectionDirectory()
    lifecycle = SessionLifecycle(
        registry=registry,
        directory=directory,
        broadcaster=SocketIOBroadcaster(socketio),
        scheduler=scheduler or TimerScheduler(socketio.start_background_task, socketio.sleep),
        countdown_seconds=app.config['COUNTDOWN_SECONDS'],
        grace_seconds=app.config['GAME_OVER_GRACE_SECONDS']
    )
    matchmaker = Matchmaker(registry, directory, lifecycle)
    activity_monitor = ActivityMonitor()

    # Register handlers (pure routing layer)
    logger.info("Registering handlers...")
    register_socket_handlers(socketio, directory, matchmaker, lifecycle, activity_monitor)
    register_api_handlers(app, registry, directory, activity_monitor)

    app.extensions['trash_rush'] = {
        'socketio': socketio,
        'registry': registry,
        'directory': directory,
        'lifecycle': lifecycle,
        'matchmaker': matchmaker,
        'activity_monitor': activity_monitor
    }

    # Background maintenance; tests drive these by hand
    if not app.config.get('TESTING'):
        socketio.start_background_task(
            lifecycle.run_sweeper, socketio.sleep, app.config['SWEEP_INTERVAL_SECONDS']
        )
        pinger = KeepAlivePinger(
            activity_monitor,
            app.config['KEEPALIVE_URL'],
            activity_timeout=app.config['ACTIVITY_TIMEOUT_SECONDS']
        )
        if pinger.enabled:
            socketio.start_background_task(
                pinger.run_forever, socketio.sleep, app.config['KEEPALIVE_INTERVAL_SECONDS']
            )

    logger.info("Application initialization complete")

    return app, socketio


def main():
    """Main entry point for the server."""

    if Settings.ASYNC_MODE == 'eventlet':
        import eventlet
        eventlet.monkey_patch()

    # Create the application
    app, socketio = create_app()

    port = Settings.PORT
    debug = Settings.DEBUG

    logger.info(f"Starting Trash Rush game server on port {port}")
    logger.info(f"Debug mode: {debug}")
    logger.info(f"CORS origins: {Settings.CORS_ORIGINS}")

    # Run the server
    socketio.run(app, debug=debug, port=port, host='0.0.0.0')


if __name__ == '__main__':
    main()
