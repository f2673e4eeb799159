import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql").lower()
DB_CONFIG = Config.db_config()

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = False

RESYNC_INTERVAL_SECONDS = Config.RESYNC_INTERVAL_SECONDS
TICK_INTERVAL_SECONDS = Config.TICK_INTERVAL_SECONDS
LOCATION_TIMEOUT_SECONDS = Config.LOCATION_TIMEOUT_SECONDS
