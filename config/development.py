import os

from .config import DB_CONFIG, Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = dict(DB_CONFIG)

DEBUG = True

CHECKIN_WINDOW_MINUTES = Config.CHECKIN_WINDOW_MINUTES
MAX_OCCURRENCES = Config.MAX_OCCURRENCES

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_JSON = Config.LOG_JSON

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo organization and users on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
