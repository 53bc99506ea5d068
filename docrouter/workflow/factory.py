from docrouter.config.settings import Settings
from docrouter.jobs.factory import JobClientFactory
from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.workflow.base import BaseWorkflowEngine
from docrouter.workflow.runner import WorkflowRunner
from docrouter.workflow.workflows_adapter import WorkflowsEngineAdapter


class WorkflowRunnerFactory:
    """Creates the workflow engine adapter and the runner wrapping it."""

    @classmethod
    def create_engine(cls, settings: Settings) -> BaseWorkflowEngine:
        settings.require("project_id", "workflow_name")
        return WorkflowsEngineAdapter(
            project_id=settings.project_id,
            location=settings.workflow_location or settings.location,
            workflow_name=settings.workflow_name,
        )

    @classmethod
    def create(
        cls,
        settings: Settings,
        blob_store: BlobStoreAdapter,
        engine: BaseWorkflowEngine | None = None,
    ) -> WorkflowRunner:
        return WorkflowRunner(
            blob_store=blob_store,
            engine=engine if engine is not None else cls.create_engine(settings),
            poller=JobClientFactory.create_poller(settings),
            bucket_name=settings.gcs_bucket_name,
        )
