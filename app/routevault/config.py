import os
from dataclasses import dataclass


# Secrets that ship in docs/examples and must never sign production tokens.
INSECURE_SECRETS = frozenset({"change-me", "changeme", "secret"})


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str

    storage_backend: str
    data_dir: str
    data_file: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str

    token_max_age_seconds: int
    password_hash_method: str

    rate_limit_general: int
    rate_limit_login: int
    rate_limit_window_seconds: int

    admin_username: str
    admin_password: str
    seed_locations: tuple[str, ...]
    cors_origins: tuple[str, ...]


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).") from e


def _getlist(name: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in _getenv(name).split(",") if part.strip())


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY"),
        env=_getenv("ENV", "development"),
        storage_backend=_getenv("STORAGE_BACKEND", "local"),
        data_dir=_getenv("DATA_DIR", os.path.join(os.getcwd(), "storage")),
        data_file=_getenv("DATA_FILE", "data.json"),
        s3_endpoint=_getenv("S3_ENDPOINT", ""),
        s3_region=_getenv("S3_REGION", "nyc3"),
        s3_bucket=_getenv("S3_BUCKET", ""),
        s3_access_key_id=_getenv("S3_ACCESS_KEY_ID", ""),
        s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY", ""),
        token_max_age_seconds=_getint("TOKEN_MAX_AGE_SECONDS", 24 * 60 * 60),
        password_hash_method=_getenv("PASSWORD_HASH_METHOD", "scrypt"),
        rate_limit_general=_getint("RATE_LIMIT_GENERAL", 100),
        rate_limit_login=_getint("RATE_LIMIT_LOGIN", 5),
        rate_limit_window_seconds=_getint("RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
        admin_username=_getenv("ADMIN_USERNAME", "admin"),
        admin_password=os.environ.get("ADMIN_PASSWORD") or "change-me",
        seed_locations=_getlist("SEED_LOCATIONS"),
        cors_origins=_getlist("CORS_ORIGINS"),
    )


def check_secret_key(secret_key: str | None) -> None:
    """Refuse to boot without a real signing secret."""
    if not secret_key or secret_key.strip() in INSECURE_SECRETS:
        raise RuntimeError("SECRET_KEY must be set to a strong value (not empty, not a default).")


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "STORAGE_BACKEND": s.storage_backend,
        "DATA_DIR": s.data_dir,
        "DATA_FILE": s.data_file,
        "S3_ENDPOINT": s.s3_endpoint,
        "S3_REGION": s.s3_region,
        "S3_BUCKET": s.s3_bucket,
        "S3_ACCESS_KEY_ID": s.s3_access_key_id,
        "S3_SECRET_ACCESS_KEY": s.s3_secret_access_key,
        "TOKEN_MAX_AGE_SECONDS": s.token_max_age_seconds,
        "PASSWORD_HASH_METHOD": s.password_hash_method,
        "RATE_LIMIT_GENERAL": s.rate_limit_general,
        "RATE_LIMIT_LOGIN": s.rate_limit_login,
        "RATE_LIMIT_WINDOW_SECONDS": s.rate_limit_window_seconds,
        "ADMIN_USERNAME": s.admin_username,
        "ADMIN_PASSWORD": s.admin_password,
        "SEED_LOCATIONS": s.seed_locations,
        "CORS_ORIGINS": s.cors_origins,
        # JSON bodies are small; cap uploads at 10MB
        "MAX_CONTENT_LENGTH": 10 * 1024 * 1024,
    }
