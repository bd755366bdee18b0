import os

from .config import DB_CONFIG, Config

SECRET_KEY = "test-secret"
DB_CONFIG = {**DB_CONFIG, "database": os.getenv("DB_NAME", "team_attendance_test")}

DEBUG = False
TESTING = True

CHECKIN_WINDOW_MINUTES = 30
MAX_OCCURRENCES = 365

LOG_LEVEL = "WARNING"
LOG_JSON = False

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
