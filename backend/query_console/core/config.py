from pathlib import Path

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parents[3] / ".env"
load_dotenv(dotenv_path=ENV_FILE)


class Settings(BaseSettings):
    # Remote query endpoint
    QUERY_ENDPOINT_BASE_URL: str = "http://127.0.0.1:3000"
    QUERY_ENDPOINT_PATH: str = "/federations/query"
    # None keeps the request open until the endpoint answers.
    QUERY_TIMEOUT_SECONDS: float | None = None

    # CSV export
    DOWNLOAD_FILENAME: str = "query_result.csv"
    DOWNLOAD_SPOOL_MAX_BYTES: int = 8 * 1024 * 1024

    # Console sessions (one result area per open console page)
    CONSOLE_MAX_SESSIONS: int = 1024

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @property
    def query_endpoint_url(self) -> str:
        base = (self.QUERY_ENDPOINT_BASE_URL or "").strip().rstrip("/")
        if not base:
            raise ValueError(
                "QUERY_ENDPOINT_BASE_URL is empty. "
                "Set it to the base URL of the federation query service, e.g. http://127.0.0.1:3000."
            )

        path = (self.QUERY_ENDPOINT_PATH or "").strip()
        if path and not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    class Config:
        env_file = str(ENV_FILE)
        extra = "ignore"


settings = Settings()
