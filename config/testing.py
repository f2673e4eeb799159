from .config import Config

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORE_BACKEND = "memory"
DB_CONFIG = Config.db_config()

AUTO_INIT_DB = False
AUTO_SEED_DB = False

RESYNC_INTERVAL_SECONDS = 60
TICK_INTERVAL_SECONDS = 1
LOCATION_TIMEOUT_SECONDS = 1.0
