from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Wallet Backend"
    ENV: str = "dev"

    # 기본 SQLite 파일 DB (개인 개발/운영에 적합)
    # apps/backend/db.sqlite3를 절대경로로 지정하여 CWD에 따른 경로 문제 방지
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # 범위 조회 1회당 최대 일수 (양끝 포함)
    MAX_RANGE_DAYS: int = 3660
    # 반복 필드가 없는 템플릿을 건너뛰지 않고 오류로 처리
    STRICT_TEMPLATES: bool = False

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="WALLET_", case_sensitive=False)


settings = Settings()
