# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


def _parse_pairs(raw: str) -> dict[str, str]:
    """Parse ``key:value,key:value`` into a dict, skipping malformed pairs."""
    pairs: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" in pair:
            key, value = pair.split(":", 1)
            pairs[key.strip()] = value.strip()
    return pairs


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "clubflow")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8010"))

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clubflow.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Optimistic concurrency: reload-and-retry attempts per logical operation
    WRITE_RETRY_ATTEMPTS: int = int(os.getenv("WRITE_RETRY_ATTEMPTS", "3"))

    NOTIFICATION_SERVICE_URL: str = os.getenv("NOTIFICATION_SERVICE_URL", "")
    NOTIFICATION_TIMEOUT: float = float(os.getenv("NOTIFICATION_TIMEOUT", "3.0"))

    # Auth: "token:email,token:email". Bearer tokens not in the map are taken
    # as the caller email only when the trust flag is set (trusted gateway).
    AUTH_TOKENS: dict[str, str] = _parse_pairs(os.getenv("AUTH_TOKENS", ""))
    AUTH_TRUST_BEARER_EMAIL: bool = (
        os.getenv("AUTH_TRUST_BEARER_EMAIL", "false").lower() == "true"
    )

    # Bootstrap heads: "name|email|committee,name|email|committee"
    SEED_HEADS: str = os.getenv("SEED_HEADS", "")

    TRACK_LEADERBOARD_SIZE: int = int(os.getenv("TRACK_LEADERBOARD_SIZE", "5"))
    OVERALL_LEADERBOARD_SIZE: int = int(os.getenv("OVERALL_LEADERBOARD_SIZE", "10"))
    APPLY_LINK_TEMPLATE: str = os.getenv("APPLY_LINK_TEMPLATE", "/apply/{track_id}")

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
