import os

from .config import Config

SECRET_KEY = Config.SECRET_KEY

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

STORE_BACKEND = Config.STORE_BACKEND
DB_CONFIG = Config.db_config()

# If enabled (mysql backend only), schema.sql is applied on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load database/seed.sql on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB

RESYNC_INTERVAL_SECONDS = Config.RESYNC_INTERVAL_SECONDS
TICK_INTERVAL_SECONDS = Config.TICK_INTERVAL_SECONDS
LOCATION_TIMEOUT_SECONDS = Config.LOCATION_TIMEOUT_SECONDS
