import json

from google.api_core import exceptions as google_exceptions
from google.cloud.workflows import executions_v1
from google.cloud.workflows.executions_v1.types import Execution

from docrouter.jobs.exceptions import JobFailedError, JobSubmissionError
from docrouter.jobs.models import JobHandle, JobState, JobStatus
from docrouter.workflow.base import BaseWorkflowEngine

_STATE_MAP: dict[int, JobState] = {
    Execution.State.QUEUED: JobState.RUNNING,
    Execution.State.ACTIVE: JobState.RUNNING,
    Execution.State.SUCCEEDED: JobState.SUCCEEDED,
    Execution.State.FAILED: JobState.FAILED,
    Execution.State.CANCELLED: JobState.CANCELLED,
    Execution.State.UNAVAILABLE: JobState.FAILED,
}


class WorkflowsEngineAdapter(BaseWorkflowEngine):
    """Workflow adapter built on the Cloud Workflows executions API."""

    def __init__(
        self,
        *,
        project_id: str,
        location: str,
        workflow_name: str,
        client: executions_v1.ExecutionsClient | None = None,
    ) -> None:
        self._client = client if client is not None else executions_v1.ExecutionsClient()
        self._parent = self._client.workflow_path(project_id, location, workflow_name)

    def start(self, argument: dict[str, object]) -> JobHandle:
        try:
            execution = self._client.create_execution(
                request={
                    "parent": self._parent,
                    "execution": Execution(argument=json.dumps(argument)),
                }
            )
        except google_exceptions.GoogleAPIError as exc:
            raise JobSubmissionError(f"Could not start workflow {self._parent}: {exc}") from exc
        return JobHandle(name=execution.name)

    def poll(self, handle: JobHandle) -> JobStatus:
        try:
            execution = self._client.get_execution(request={"name": handle.name})
        except google_exceptions.GoogleAPIError as exc:
            raise JobFailedError(f"Polling {handle.name} failed: {exc}") from exc

        state = _STATE_MAP.get(execution.state, JobState.RUNNING)
        if state is JobState.SUCCEEDED:
            return JobStatus(state=state, result=execution.result)
        if state.is_terminal:
            payload = execution.error.payload if execution.error else ""
            return JobStatus(
                state=state,
                error=payload or f"Execution ended with state {execution.state.name}",
            )
        return JobStatus(state=state)
