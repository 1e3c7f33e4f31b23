import os
from dataclasses import dataclass


@dataclass(frozen=True)
class S3Settings:
    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str

    # Customer photos: "local" writes under public_dir, "s3" uses the bucket below.
    storage_backend: str
    public_dir: str
    s3: S3Settings

    seed_timeout_seconds: float


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///acme.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        storage_backend=_getenv("STORAGE_BACKEND", "local").lower(),
        public_dir=_getenv("PUBLIC_DIR", os.path.join(os.getcwd(), "public")),
        s3=S3Settings(
            endpoint=_getenv("S3_ENDPOINT"),
            region=_getenv("S3_REGION", "nyc3"),
            bucket=_getenv("S3_BUCKET"),
            access_key_id=_getenv("S3_ACCESS_KEY_ID"),
            secret_access_key=_getenv("S3_SECRET_ACCESS_KEY"),
        ),
        seed_timeout_seconds=float(_getenv("SEED_TIMEOUT_SECONDS", "30")),
    )


def is_production_env(env: str | None) -> bool:
    return (env or "").strip().lower() in ("prod", "production")


def load_config() -> dict:
    """Flask config mapping: settings under their env-var names plus cookie/body defaults."""
    s = load_settings()
    cfg = {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "STORAGE_BACKEND": s.storage_backend,
        "PUBLIC_DIR": s.public_dir,
        "SEED_TIMEOUT_SECONDS": s.seed_timeout_seconds,
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production_env(s.env),
        # Whole-request cap; uploads still get the 5MB image check as JSON below this.
        "MAX_CONTENT_LENGTH": 25 * 1024 * 1024,
    }
    cfg.update({f"S3_{name.upper()}": value for name, value in vars(s.s3).items()})
    return cfg
