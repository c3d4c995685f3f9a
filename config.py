import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    # Signing key for security codes. Never committed; env var wins over env.yaml.
    SECURITY_SECRET = os.environ.get("SECURITY_SECRET", data.get("SECURITY_SECRET", ""))
    SESSION_DURATION_MINUTES = int(data.get("SESSION_DURATION_MINUTES", 30))
    SESSION_ID_MAX_ATTEMPTS = int(data.get("SESSION_ID_MAX_ATTEMPTS", 5))
    SWEEP_INTERVAL_SECONDS = int(data.get("SWEEP_INTERVAL_SECONDS", 60))
    STORE_BACKEND = data.get("STORE_BACKEND", "memory")
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./security.db")
