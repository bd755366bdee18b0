import os

from .config import DB_CONFIG, Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = dict(DB_CONFIG)

DEBUG = False

CHECKIN_WINDOW_MINUTES = Config.CHECKIN_WINDOW_MINUTES
MAX_OCCURRENCES = Config.MAX_OCCURRENCES

LOG_LEVEL = Config.LOG_LEVEL
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = False
