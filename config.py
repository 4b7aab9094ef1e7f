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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sessions.db")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Credential issuance (access tokens only; session admission is separate)
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_MINUTES = data.get(
        "ACCESS_TOKEN_MINUTES", {"admin": 43200, "client": 1440}
    )

    # Admission policy per role: concurrent session bound and idle TTL.
    # Admin sessions run long with sparse heartbeats, hence the much larger TTL.
    SESSION_POLICY = data.get(
        "SESSION_POLICY",
        {
            "admin": {"limit": 2, "ttl_seconds": 30 * 24 * 3600},
            "client": {"limit": 1, "ttl_seconds": 10 * 60},
        },
    )
    DEFAULT_SESSION_ROLE = data.get("DEFAULT_SESSION_ROLE", "client")
    SESSION_RETENTION_SECONDS = data.get("SESSION_RETENTION_SECONDS", 7 * 24 * 3600)
    # "reject" or "admit" (audited self-heal for requests without a known session)
    MISSING_SESSION_POLICY = data.get("MISSING_SESSION_POLICY", "reject")
    HEARTBEAT_INTERVAL_SECONDS = data.get("HEARTBEAT_INTERVAL_SECONDS", 30)
    SESSION_HEADER = data.get("SESSION_HEADER", "X-Session-Id")
    DEVICE_HEADER = data.get("DEVICE_HEADER", "X-Device-Id")

    ELEVATED_ROLES = data.get("ELEVATED_ROLES", ["admin"])

    LOGIN_ATTEMPTS_DEFAULT_LIMIT = data.get("LOGIN_ATTEMPTS_DEFAULT_LIMIT", 100)
    LOGIN_ATTEMPTS_MAX_LIMIT = data.get("LOGIN_ATTEMPTS_MAX_LIMIT", 500)
