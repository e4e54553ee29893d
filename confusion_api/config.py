import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

# Load a local .env file if present; real environment variables win.
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    return int(raw)


def _split_csv(raw: str) -> List[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Built once at process start and handed to `create_app`. Components that need a
    setting (token signing, password hashing, CORS, uploads) receive it from here;
    nothing reads these values from module globals.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    """

    # -----------------
    # Store
    # -----------------
    # Preferred: CONFUSION_DATABASE_URL (or DATABASE_URL) for Postgres.
    # Fallback: CONFUSION_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("CONFUSION_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("CONFUSION_DB_PATH", "./confusion.sqlite")
    )

    # Upper bound for a single store call. Exceeding it fails the request (500), no retry.
    DB_TIMEOUT_SECONDS: int = _env_int("DB_TIMEOUT_SECONDS", 15)

    # -----------------
    # Auth (JWT + password hashing)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    # Changing it invalidates every outstanding token.
    AUTH_JWT_SECRET: str = os.environ.get(
        "AUTH_JWT_SECRET",
        "dev-change-me-12345-67890-09876-54321",
    )
    AUTH_TOKEN_EXPIRE_HOURS: int = _env_int("AUTH_TOKEN_EXPIRE_HOURS", 24)

    # pbkdf2_sha256 cost. Fixed per deployment, never derived from a request.
    AUTH_HASH_ROUNDS: int = _env_int("AUTH_HASH_ROUNDS", 29000)

    # Bootstrap first admin user if users table is empty.
    # Set the username to an empty string to disable.
    AUTH_BOOTSTRAP_ADMIN_USERNAME: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_USERNAME", "admin")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "admin")

    # -----------------
    # CORS
    # -----------------
    # The Angular/React dev servers and the TLS front end.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:3000,https://localhost:3443,http://localhost:4200",
    )

    # -----------------
    # Image uploads
    # -----------------
    PUBLIC_IMAGES_DIR: str = os.environ.get("PUBLIC_IMAGES_DIR", "./public/images")
    MAX_UPLOAD_BYTES: int = _env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)  # 5MB

    # -----------------
    # Facebook (token login)
    # -----------------
    FACEBOOK_GRAPH_URL: str = os.environ.get("FACEBOOK_GRAPH_URL", "https://graph.facebook.com")
    FACEBOOK_TIMEOUT_SECONDS: int = _env_int("FACEBOOK_TIMEOUT_SECONDS", 15)

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.CORS_ALLOW_ORIGINS)


def load_config() -> Config:
    return Config()
