import uvicorn
from fastapi import FastAPI

from docrouter.api.app import create_app
from docrouter.config.settings import Settings
from docrouter.decoding.decoder import OutputDecoder
from docrouter.jobs.factory import JobClientFactory
from docrouter.logging.logger import Log
from docrouter.processor.orchestrator import build_orchestrator
from docrouter.processor.single_document import SingleDocumentProcessor
from docrouter.processor.summarizer import SummarizerPipeline
from docrouter.routing.registry import ProcessorRegistry
from docrouter.routing.type_router import TypeRouter
from docrouter.runner.request_runner import RequestRunner
from docrouter.storage.blob_store import BlobStoreAdapter
from docrouter.storage.factory import BlobStoreFactory
from docrouter.workflow.factory import WorkflowRunnerFactory


def build_runner(settings: Settings) -> RequestRunner:
    """Build a RequestRunner with all required adapters."""
    blob_store = BlobStoreAdapter(BlobStoreFactory.create(settings))
    job_client = JobClientFactory.create(settings, blob_store)
    registry = ProcessorRegistry.from_settings(settings)
    router = TypeRouter(registry)

    orchestrator = build_orchestrator(settings, blob_store, job_client, registry)
    summarizer = SummarizerPipeline(
        blob_store=blob_store,
        job_client=job_client,
        decoder=OutputDecoder(blob_store),
        processor_id=settings.summarizer_processor_id,
    )
    single_processor = SingleDocumentProcessor(
        engine=job_client.engine,
        router=router,
        classifier_processor_id=settings.classifier_processor_id,
        threshold=settings.single_classification_threshold,
    )
    workflow_runner = None
    if settings.workflow_name:
        workflow_runner = WorkflowRunnerFactory.create(settings, blob_store)
    else:
        Log.info("WORKFLOW_NAME not set, workflow operation disabled")

    return RequestRunner(
        settings=settings,
        orchestrator=orchestrator,
        summarizer=summarizer,
        single_processor=single_processor,
        workflow_runner=workflow_runner,
    )


def build_app(settings: Settings) -> FastAPI:
    return create_app(build_runner(settings), settings)


def main() -> None:
    """Entry point: load settings -> build dependencies -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    app = build_app(settings)
    Log.info(f"Starting docrouter on {settings.host}:{settings.port} ({settings.app_env})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
