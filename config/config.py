import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # "memory" keeps everything in process; "mysql" uses DB_CONFIG below.
    STORE_BACKEND = os.environ.get("STORE_BACKEND", "memory").lower()

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "timeclock_db")

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))

    RESYNC_INTERVAL_SECONDS = int(os.environ.get("RESYNC_INTERVAL_SECONDS", "60"))
    TICK_INTERVAL_SECONDS = int(os.environ.get("TICK_INTERVAL_SECONDS", "1"))
    LOCATION_TIMEOUT_SECONDS = float(os.environ.get("LOCATION_TIMEOUT_SECONDS", "10"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
