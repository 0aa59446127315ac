import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///arcade.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8888",
        "http://127.0.0.1:8888",
    ]

    # Leaderboard ('sql' keeps the record in the blob table, 'memory' in-process)
    LEADERBOARD_BACKEND = 'sql'
    LEADERBOARD_KEY = 'scores'
    LEADERBOARD_SIZE = 20
    # Plausibility checks
    SUBMISSION_FRESHNESS_MS = 10 * 60 * 1000
    SNAKE_LENGTH_TOLERANCE = 2
    MIN_MS_PER_FOOD = 500
    # Admission control: N submissions per window per source address
    RATE_LIMIT_MAX = 5
    RATE_LIMIT_WINDOW_MS = 60 * 1000
    # GET /get-leaderboard cache lifetime
    LEADERBOARD_CACHE_TTL_MS = 5 * 1000
    # Store retries: attempts per read/write, linear backoff step (ms)
    STORE_RETRIES = 3
    STORE_RETRY_BACKOFF_MS = 100
    # Full read-modify-write reruns after a conditional-write conflict
    STORE_CONFLICT_RETRIES = 5
