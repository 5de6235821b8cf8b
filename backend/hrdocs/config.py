from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "HRDocs"
    database_url: str | None = None
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    # Defaults applied to new document types that don't specify their own.
    default_allowed_file_types: str = "pdf,jpg,jpeg,png,doc,docx"
    default_max_file_size_mb: float = 5.0

    # When enabled, the last document of a mandatory single-document type
    # cannot be removed even if the type allows marking it not applicable.
    strict_mandatory_guard: bool = False

    expiry_warning_days: int = 30
    expiry_reminder_days: list[int] = [30, 7, 0]

    @property
    def db_path(self) -> Path:
        return self.data_path / "hrdocs.sqlite"

    @property
    def db_url(self) -> str:
        return self.database_url or f"sqlite:///{self.db_path}"

    model_config = {"env_prefix": "HRDOCS_"}


settings = Settings()
