import os

class Settings:
    ADMIN_USER = os.getenv("ADMIN_USER", "admin")
    ADMIN_PASS = os.getenv("ADMIN_PASS", "")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dashboard.db")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Catalogus
    DEFAULT_CATEGORY = os.getenv("DEFAULT_CATEGORY", "Uncategorized")
    MAX_AREA_NAME_LEN = int(os.getenv("MAX_AREA_NAME_LEN", "40"))
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

settings = Settings()
