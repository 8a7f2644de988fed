from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Supabase (collection store + auth provider) ===
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str

    # === HTTP ===
    HTTP_TIMEOUT_SEC: float = 30.0

    # === Admin 판정 ===
    ADMIN_ROLE: str = "admin"
    ADMIN_EMAILS: str = ""

    # === Server ===
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    # === View 세션 ===
    # 마지막 접근 이후 이 시간이 지나면 세션을 버린다
    VIEW_SESSION_TTL_SEC: int = 3600

    LOG_LEVEL: str = "INFO"

    @property
    def rest_base(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/rest/v1"

    @property
    def auth_base(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1"

    @property
    def admin_email_set(self) -> set[str]:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}


settings = Settings()
