from docrouter.config.settings import Settings
from docrouter.jobs.base import BaseJobEngine
from docrouter.jobs.documentai_adapter import DocumentAiEngineAdapter
from docrouter.jobs.job_client import AsyncJobClient
from docrouter.jobs.polling import JobPoller
from docrouter.storage.blob_store import BlobStoreAdapter


class JobClientFactory:
    """Creates the job engine adapter and the client wrapping it."""

    @classmethod
    def create_engine(cls, settings: Settings) -> BaseJobEngine:
        settings.require("project_id", "location")
        return DocumentAiEngineAdapter(project_id=settings.project_id, location=settings.location)

    @classmethod
    def create_poller(cls, settings: Settings) -> JobPoller:
        return JobPoller(
            interval_seconds=settings.job_poll_interval_seconds,
            max_wait_seconds=settings.job_max_wait_seconds,
        )

    @classmethod
    def create(
        cls,
        settings: Settings,
        blob_store: BlobStoreAdapter,
        engine: BaseJobEngine | None = None,
    ) -> AsyncJobClient:
        return AsyncJobClient(
            engine=engine if engine is not None else cls.create_engine(settings),
            blob_store=blob_store,
            poller=cls.create_poller(settings),
        )
