from pydantic_settings import BaseSettings, SettingsConfigDict

from docrouter.config.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3000

    storage_backend: str = "gcs"
    gcs_bucket_name: str = ""

    project_id: str = ""
    location: str = "us"

    classifier_processor_id: str = ""
    aadhar_processor_id: str = ""
    pan_processor_id: str = ""
    invoice_processor_id: str = ""
    extra_type_processors: dict[str, str] = {}
    type_aliases: dict[str, str] = {
        "aadharCard": "adharCard",
        "aadhaarCard": "adharCard",
        "panCard": "Pancard",
        "PanCard": "Pancard",
    }

    summarizer_processor_id: str = ""

    workflow_name: str = ""
    workflow_location: str = ""

    batch_classification_threshold: float = 0.7
    single_classification_threshold: float = 0.9

    job_poll_interval_seconds: float = 5
    job_max_wait_seconds: float = 1800
    extraction_max_workers: int = 1

    max_upload_files: int = 5
    max_upload_file_size_bytes: int = 10 * 1024 * 1024

    def require(self, *names: str) -> None:
        """Raise ConfigurationError naming every empty setting in ``names``."""
        missing = [name for name in names if not str(getattr(self, name, "") or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(n.upper() for n in missing)}"
            )
