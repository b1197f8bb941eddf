from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings


def _usable_key(value: str) -> str:
    value = value.strip()
    return "" if value == "undefined" else value


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"
    gemini_api_key: str = ""
    # Frontend builds expose the key under the VITE_ prefix
    vite_gemini_api_key: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _resolve_gemini_api_key(self) -> "Settings":
        # A blank or "undefined" primary key falls through to the VITE_ one
        self.gemini_api_key = _usable_key(self.gemini_api_key) or _usable_key(self.vite_gemini_api_key)
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
