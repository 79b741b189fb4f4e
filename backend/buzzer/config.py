import os


def _origins(value):
    value = (value or '').strip()
    if not value or value == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Roster cap per party
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '8'))
    # Auto-advance timers (milliseconds)
    CORRECT_ADVANCE_MS = int(os.environ.get('CORRECT_ADVANCE_MS', '5000'))
    TIME_UP_DELAY_MS = int(os.environ.get('TIME_UP_DELAY_MS', '1800'))
    TIME_UP_ADVANCE_MS = int(os.environ.get('TIME_UP_ADVANCE_MS', '5000'))
    # Timers are not started in TESTING unless this is set
    ENABLE_TIMERS_IN_TESTS = False
