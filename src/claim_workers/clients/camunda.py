"""External task REST binding of the task queue.

Variables travel as typed envelopes, ``{"value": ..., "type": ...}``. They
are decoded into plain Python values when tasks are fetched and encoded
again when a task is completed.
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import httpx
from beartype import beartype

from ..core.config import Settings
from ..core.logging_utils import get_logger
from ..models.task import ExternalTask
from .base import ApiClient

logger = get_logger(__name__)

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return datetime.fromisoformat(value)


def _format_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    millis = f"{value.microsecond // 1000:03d}"
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{millis}{value.strftime('%z')}"


@beartype
def decode_variable(envelope: dict[str, Any]) -> Any:
    """Turn a typed variable envelope into a plain value."""
    value = envelope.get("value")
    var_type = str(envelope.get("type") or "").lower()

    if value is None or var_type == "null":
        return None
    if var_type == "date" and isinstance(value, str):
        return _parse_date(value)
    if var_type == "json" and isinstance(value, str):
        return json.loads(value)
    if var_type == "object" and isinstance(value, str):
        value_info = envelope.get("valueInfo") or {}
        if value_info.get("serializationDataFormat") == "application/json":
            return json.loads(value)
    return value


@beartype
def encode_variable(value: Any) -> dict[str, Any]:
    """Wrap a plain value in the typed envelope the engine expects."""
    if value is None:
        return {"value": None, "type": "Null"}
    if isinstance(value, bool):
        return {"value": value, "type": "Boolean"}
    if isinstance(value, int):
        if LONG_MIN <= value <= LONG_MAX:
            return {"value": value, "type": "Long"}
        return {"value": str(value), "type": "String"}
    if isinstance(value, (float, Decimal)):
        return {"value": float(value), "type": "Double"}
    if isinstance(value, datetime):
        return {"value": _format_date(value), "type": "Date"}
    if isinstance(value, date):
        return {"value": value.isoformat(), "type": "String"}
    if isinstance(value, (dict, list)):
        return {"value": json.dumps(value, default=str), "type": "Json"}
    return {"value": str(value), "type": "String"}


class CamundaTaskQueue(ApiClient):
    """Task queue backed by the engine's external task REST API."""

    service_name = "External task API"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        worker_id: str,
        *,
        async_response_timeout_ms: int = 0,
    ) -> None:
        """Bind the queue to a worker identity."""
        super().__init__(http_client)
        self.worker_id = worker_id
        self.async_response_timeout_ms = async_response_timeout_ms

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "CamundaTaskQueue":
        """Create a queue client from application settings."""
        # Long polling holds the request open, so the read timeout must outlast it.
        timeout = settings.api_timeout_seconds + settings.async_response_timeout_ms / 1000
        return cls(
            httpx.AsyncClient(
                base_url=settings.camunda_base_url,
                timeout=timeout,
                headers={"Accept": "application/json"},
            ),
            settings.worker_id,
            async_response_timeout_ms=settings.async_response_timeout_ms,
        )

    @beartype
    async def fetch_and_lock(
        self, topic: str, max_tasks: int, lock_duration_ms: int
    ) -> list[ExternalTask]:
        """Lock up to ``max_tasks`` tasks of ``topic`` for this worker."""
        body: dict[str, Any] = {
            "workerId": self.worker_id,
            "maxTasks": max_tasks,
            "usePriority": True,
            "topics": [{"topicName": topic, "lockDuration": lock_duration_ms}],
        }
        if self.async_response_timeout_ms > 0:
            body["asyncResponseTimeout"] = self.async_response_timeout_ms

        data = await self._request("POST", "/external-task/fetchAndLock", json=body)
        tasks = []
        for item in data or []:
            variables = {
                name: decode_variable(envelope)
                for name, envelope in (item.get("variables") or {}).items()
            }
            payload = {**item, "variables": variables}
            if isinstance(item.get("lockExpirationTime"), str):
                payload["lockExpirationTime"] = _parse_date(item["lockExpirationTime"])
            tasks.append(ExternalTask.model_validate(payload))
        return tasks

    @beartype
    async def complete(self, task: ExternalTask, variables: dict[str, Any]) -> None:
        """Complete a locked task, publishing ``variables`` to the process."""
        body = {
            "workerId": self.worker_id,
            "variables": {name: encode_variable(value) for name, value in variables.items()},
        }
        await self._request("POST", f"/external-task/{task.id}/complete", json=body)
        logger.debug("Completed task %s", task.id)

    @beartype
    async def fail(
        self,
        task: ExternalTask,
        error_message: str,
        error_details: str,
        retries: int,
        retry_timeout_ms: int,
    ) -> None:
        """Report a failure; the engine retries or raises an incident."""
        body = {
            "workerId": self.worker_id,
            "errorMessage": error_message,
            "errorDetails": error_details,
            "retries": retries,
            "retryTimeout": retry_timeout_ms,
        }
        await self._request("POST", f"/external-task/{task.id}/failure", json=body)
