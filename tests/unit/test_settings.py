import pytest

from docrouter.config.exceptions import ConfigurationError
from docrouter.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_port(self) -> None:
        s = Settings()
        assert s.port == 3000

    def test_default_thresholds(self) -> None:
        s = Settings()
        assert s.batch_classification_threshold == 0.7
        assert s.single_classification_threshold == 0.9

    def test_default_job_poll_interval(self) -> None:
        s = Settings()
        assert s.job_poll_interval_seconds == 5

    def test_default_upload_limits(self) -> None:
        s = Settings()
        assert s.max_upload_files == 5
        assert s.max_upload_file_size_bytes == 10 * 1024 * 1024

    def test_default_type_aliases(self) -> None:
        s = Settings()
        assert s.type_aliases["aadhaarCard"] == "adharCard"
        assert s.type_aliases["panCard"] == "Pancard"

    def test_sequential_extraction_by_default(self) -> None:
        s = Settings()
        assert s.extraction_max_workers == 1


class TestSettingsFromEnv:
    def test_loads_project_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROJECT_ID", "my-project")
        s = Settings()
        assert s.project_id == "my-project"

    def test_loads_processor_ids(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLASSIFIER_PROCESSOR_ID", "cls-1")
        monkeypatch.setenv("INVOICE_PROCESSOR_ID", "inv-1")
        s = Settings()
        assert s.classifier_processor_id == "cls-1"
        assert s.invoice_processor_id == "inv-1"

    def test_loads_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BATCH_CLASSIFICATION_THRESHOLD", "0.55")
        s = Settings()
        assert s.batch_classification_threshold == 0.55

    def test_loads_extra_type_processors_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXTRA_TYPE_PROCESSORS", '{"passport": "pp-1"}')
        s = Settings()
        assert s.extra_type_processors == {"passport": "pp-1"}


class TestRequire:
    def test_passes_when_present(self) -> None:
        s = Settings(project_id="p", classifier_processor_id="c")
        s.require("project_id", "classifier_processor_id")

    def test_names_every_missing_value(self) -> None:
        s = Settings(project_id="", classifier_processor_id="  ")
        with pytest.raises(ConfigurationError) as exc_info:
            s.require("project_id", "classifier_processor_id")
        assert "PROJECT_ID" in str(exc_info.value)
        assert "CLASSIFIER_PROCESSOR_ID" in str(exc_info.value)
