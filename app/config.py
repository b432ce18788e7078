from __future__ import annotations

import os
from dataclasses import dataclass, fields
from fractions import Fraction


def _csv(value: str) -> list[str]:
    items: list[str] = []
    for part in (value or "").split(","):
        item = part.strip()
        if item:
            items.append(item)
    return items


def _env_bool(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "") or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_str(name: str, default: str) -> str:
    return str(os.getenv(name, default) or default)


@dataclass(frozen=True)
class BaseConfig:
    ENV: str = "development"
    DEBUG: bool = False
    TESTING: bool = False

    APP_VERSION: str = "dev"

    DATABASE_URL: str = "sqlite:///./assessments.db"
    DB_CREATE_SCHEMA: bool = True

    # Share of questions that must be answered correctly to pass.
    PASS_RATIO: float = 0.8
    ASSESSMENT_TYPE_LABEL: str = "Custom"

    # 0 disables the deadline for that call.
    AUTH_CHECK_TIMEOUT_SECONDS: float = 10.0
    QUESTION_LOAD_TIMEOUT_SECONDS: float = 15.0
    HISTORY_WRITE_TIMEOUT_SECONDS: float = 15.0
    HISTORY_WRITER_THREADS: int = 2
    # worker threads for each of the auth-check and question-load pools
    DEADLINE_POOL_THREADS: int = 8

    SESSION_TTL_MINUTES: int = 240
    SESSION_MAX_ACTIVE: int = 20_000

    CORS_ORIGINS: list[str] | str = (
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000"
    )
    CORS_ALLOW_CREDENTIALS: bool = False

    LOG_LEVEL: str = "INFO"

    RATE_LIMIT_GLOBAL: str = "1200 per minute"
    RATE_LIMIT_DEFAULT: str = "300 per minute"
    RATE_LIMIT_SESSION_START: str = "30 per minute"

    TRUST_PROXY_HEADERS: bool = True

    def __post_init__(self) -> None:
        readers = {bool: _env_bool, int: _env_int, float: _env_float, str: _env_str}
        types = {"bool": bool, "int": int, "float": float, "str": str}
        for f in fields(self):
            if f.name in {"ENV", "DEBUG", "TESTING", "CORS_ORIGINS"}:
                continue
            reader = readers[types[str(f.type)]]
            object.__setattr__(self, f.name, reader(f.name, getattr(self, f.name)))

        object.__setattr__(self, "LOG_LEVEL", str(self.LOG_LEVEL).upper())

        cors_raw = os.getenv("CORS_ORIGINS")
        if cors_raw is not None:
            cors_raw = str(cors_raw or "").strip()
            if cors_raw == "*":
                object.__setattr__(self, "CORS_ORIGINS", "*")
            else:
                object.__setattr__(self, "CORS_ORIGINS", _csv(cors_raw))
        else:
            object.__setattr__(self, "CORS_ORIGINS", _csv(str(self.CORS_ORIGINS)))

    @property
    def IS_PRODUCTION(self) -> bool:
        return str(self.ENV or "").lower() == "production"

    def validate(self) -> None:
        ratio = Fraction(str(self.PASS_RATIO))
        if ratio <= 0 or ratio > 1:
            raise RuntimeError("PASS_RATIO must be greater than 0 and at most 1")
        if self.HISTORY_WRITER_THREADS < 1:
            raise RuntimeError("HISTORY_WRITER_THREADS must be at least 1")
        if self.DEADLINE_POOL_THREADS < 1:
            raise RuntimeError("DEADLINE_POOL_THREADS must be at least 1")
        if self.SESSION_TTL_MINUTES < 1:
            raise RuntimeError("SESSION_TTL_MINUTES must be at least 1")
        if self.IS_PRODUCTION and str(self.DATABASE_URL or "").startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (Supabase recommended)")
        if self.IS_PRODUCTION and self.CORS_ORIGINS == "*":
            raise RuntimeError("CORS_ORIGINS must not be '*' in production")


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    ENV: str = "development"
    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    ENV: str = "production"
    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    __test__ = False

    ENV: str = "testing"
    TESTING: bool = True
    AUTH_CHECK_TIMEOUT_SECONDS: float = 0.0
    QUESTION_LOAD_TIMEOUT_SECONDS: float = 0.0


def get_config() -> BaseConfig:
    env = str(os.getenv("ENV") or os.getenv("APP_ENV") or "development").strip().lower()
    if env in {"prod", "production"}:
        cfg: BaseConfig = ProductionConfig()
    elif env in {"test", "testing"}:
        cfg = TestingConfig()
    else:
        cfg = DevelopmentConfig()

    cfg.validate()
    return cfg
