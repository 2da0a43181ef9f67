import os
from dotenv import load_dotenv

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Settings:
    """Server configuration, read once from the environment."""

    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    TESTING = False

    # Server Configuration
    PORT = _env_int('PORT', 5000)
    DEBUG = os.environ.get('RENDER', '') != 'true'
    ASYNC_MODE = os.getenv('ASYNC_MODE', 'eventlet')

    # Render Configuration
    IS_RENDER = os.environ.get("RENDER", "") == "true"

    # Keep-alive: self-ping target, disabled when empty
    KEEPALIVE_URL = os.getenv('KEEPALIVE_URL', '')
    KEEPALIVE_INTERVAL_SECONDS = _env_int('KEEPALIVE_INTERVAL_SECONDS', 60)
    ACTIVITY_TIMEOUT_SECONDS = _env_int('ACTIVITY_TIMEOUT_SECONDS', 300)

    # Session tunables
    MAX_PLAYERS = _env_int('MAX_PLAYERS', 4)
    MIN_PLAYERS = _env_int('MIN_PLAYERS', 2)
    MAX_ROUNDS = _env_int('MAX_ROUNDS', 3)
    COUNTDOWN_SECONDS = _env_int('COUNTDOWN_SECONDS', 3)
    GAME_OVER_GRACE_SECONDS = _env_int('GAME_OVER_GRACE_SECONDS', 30)
    SESSION_MAX_AGE_MINUTES = _env_int('SESSION_MAX_AGE_MINUTES', 30)
    SWEEP_INTERVAL_SECONDS = _env_int('SWEEP_INTERVAL_SECONDS', 300)

    @classmethod
    def cors_origins(cls):
        """CORS origins as a list, or '*' for any origin."""
        if cls.CORS_ORIGINS.strip() == '*':
            return '*'
        return [origin.strip() for origin in cls.CORS_ORIGINS.split(',') if origin.strip()]
