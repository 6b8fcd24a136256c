import sys
from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """
    SDK-wide settings.
    Read from environment variables (.env) and type-checked on load.
    """
    # REST / streaming endpoints
    V20_HOSTNAME: str = "api-fxpractice.oanda.com"
    V20_STREAM_HOSTNAME: str = "stream-fxpractice.oanda.com"
    V20_PORT: int = 443
    V20_SSL: bool = True

    # Credentials
    V20_TOKEN: Optional[str] = None
    V20_ACCOUNT_ID: Optional[str] = None

    # Appended to the OANDA-Agent header
    V20_APPLICATION: str = ""

    # Transport behaviour
    V20_REQUEST_TIMEOUT: float = 10
    V20_STREAM_TIMEOUT: float = 30
    V20_STREAM_CHUNK_SIZE: int = 512

    # Malformed stream records raise instead of being skipped
    V20_STREAM_STRICT: bool = False

    # Unparsable JSON bodies raise instead of passing through
    V20_RESPONSE_STRICT: bool = False

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

# Singleton Instance
try:
    settings = Settings()
except Exception as e:
    # logging depends on settings, so report straight to stderr
    print(f"CRITICAL: Failed to load configuration. Invalid env vars? {e}", file=sys.stderr)
    settings = None
