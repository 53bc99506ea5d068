import asyncio
import contextlib
import threading

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from docrouter.config.settings import Settings
from docrouter.logging.logger import Log
from docrouter.processor.models import InputDocument
from docrouter.runner.request_runner import Operation, RequestRunner

BATCH_OPERATIONS = (Operation.CLASSIFY_AND_EXTRACT, Operation.SUMMARIZE, Operation.WORKFLOW)
DEFAULT_MIME_TYPE = "application/octet-stream"
DISCONNECT_CHECK_SECONDS = 1.0


class UploadRejected(Exception):
    """Raised when an upload breaks the request limits."""


def create_app(runner: RequestRunner, settings: Settings) -> FastAPI:
    """Build the HTTP surface around a RequestRunner."""
    app = FastAPI(title="docrouter")

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Document router is running"

    @app.post("/api/upload")
    async def upload(
        request: Request,
        documents: list[UploadFile] | None = File(None),
        operation: str = Query(Operation.CLASSIFY_AND_EXTRACT.value),
    ) -> JSONResponse:
        selected = _parse_operation(operation)
        if selected is None:
            return _error(400, f"Unknown operation '{operation}'")
        if not documents:
            return _error(400, "No files uploaded")
        if len(documents) > settings.max_upload_files:
            return _error(400, f"Too many files: at most {settings.max_upload_files} per request")
        try:
            inputs = [await _read_upload(f, settings.max_upload_file_size_bytes) for f in documents]
        except UploadRejected as exc:
            return _error(400, str(exc))

        Log.info(f"Received {len(inputs)} files for {selected.value}")
        return await _run(request, runner, selected, inputs)

    @app.post("/api/classify")
    async def classify(
        request: Request,
        document: UploadFile | None = File(None),
    ) -> JSONResponse:
        if document is None:
            return _error(400, "No files uploaded")
        try:
            single = await _read_upload(document, settings.max_upload_file_size_bytes)
        except UploadRejected as exc:
            return _error(400, str(exc))
        return await _run(request, runner, Operation.CLASSIFY_SINGLE, [single])

    return app


def _parse_operation(value: str) -> Operation | None:
    try:
        operation = Operation(value)
    except ValueError:
        return None
    return operation if operation in BATCH_OPERATIONS else None


async def _read_upload(upload: UploadFile, max_size: int) -> InputDocument:
    content = await upload.read(max_size + 1)
    name = upload.filename or ""
    if len(content) > max_size:
        raise UploadRejected(f"File '{name}' exceeds the {max_size} byte limit")
    return InputDocument(
        local_id=name,
        content=content,
        mime_type=upload.content_type or DEFAULT_MIME_TYPE,
    )


async def _run(
    request: Request,
    runner: RequestRunner,
    operation: Operation,
    inputs: list[InputDocument],
) -> JSONResponse:
    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        response = await run_in_threadpool(runner.run, operation, inputs, cancel_event)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
    return JSONResponse(status_code=response.status_code, content=response.body())


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            Log.warning("Client disconnected, cancelling the running request")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_CHECK_SECONDS)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
