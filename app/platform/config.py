from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "UX Audit Bot"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Blanket per-request budget, covers the slowest driver (Lighthouse)
    REQUEST_TIMEOUT_SECONDS: float = 120.0

    # ── Logging ─────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE: str = "ux_audit.log"

    # ── Static files & locales ──────────────────
    LOCALES_DIR: str = str(BASE_DIR / "lang")
    STATIC_DIR: str = str(BASE_DIR / "public")
    DEFAULT_LANG: str = "ru"
    FALLBACK_LANG: str = "en"

    # ── Mock audit ──────────────────────────────
    MOCK_AUDIT_DELAY_SECONDS: float = 1.0
    MOCK_AUDIT_SEED: Optional[int] = None

    # ── Browser ─────────────────────────────────
    CHROMEDRIVER_PATH: Optional[str] = None
    CHROME_BINARY: Optional[str] = None
    USE_WEBDRIVER_MANAGER: bool = False
    CHROME_EXTRA_ARGS: List[str] = []

    # ── UX audit ────────────────────────────────
    NAVIGATION_TIMEOUT_SECONDS: int = 30
    NETWORK_IDLE_MS: int = 500
    UX_SETTLE_DELAY_SECONDS: float = 2.0
    UX_MOBILE_SETTLE_DELAY_SECONDS: float = 1.0

    # ── Lighthouse ──────────────────────────────
    LIGHTHOUSE_BIN: str = "lighthouse"
    LIGHTHOUSE_TIMEOUT_SECONDS: float = 90.0

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
