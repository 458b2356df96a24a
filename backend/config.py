import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Flat name -> wins JSON document, rewritten on every win
    LEADERBOARD_FILE = os.environ.get('LEADERBOARD_FILE', 'leaderboard.json')
    # Round timing (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '15'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    ROUND_COOLDOWN_SEC = float(os.environ.get('ROUND_COOLDOWN_SEC', '2'))
    # Consecutive hits needed to win a match
    WIN_STREAK = int(os.environ.get('WIN_STREAK', '3'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Tests drive round timers by hand unless this is set
    ENABLE_SCHEDULER_IN_TESTS = False
