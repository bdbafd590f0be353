"""External task and its process variable bag.

Workers never read raw variables. They go through :class:`TaskVariables`,
whose typed getters return ``None`` for an absent variable and fail fast
with :class:`TaskVariableError` when a variable holds the wrong type.
"""

from collections.abc import Iterator, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

from beartype import beartype
from pydantic import Field

from .base import ApiModel


class TaskVariableError(ValueError):
    """A process variable is missing or has the wrong type."""


@beartype
class ExternalTask(ApiModel):
    """Unit of work locked from the external task queue."""

    id: str = Field(..., min_length=1, description="Task identifier")
    topic_name: str = Field(..., min_length=1, description="Topic routing the task")
    worker_id: str | None = Field(None, description="Worker holding the lock")
    activity_id: str | None = Field(None, description="BPMN activity of the task")
    process_instance_id: str | None = Field(None, description="Owning process instance")
    business_key: str | None = Field(None, description="Process business key")
    retries: int | None = Field(
        None, description="Remaining retries, None before the first failure"
    )
    lock_expiration_time: datetime | None = Field(None, description="When the lock expires")
    variables: dict[str, Any] = Field(default_factory=dict, description="Decoded variables")

    @property
    def variable_bag(self) -> "TaskVariables":
        """Read-only typed view over the task variables."""
        return TaskVariables(self.variables)


class TaskVariables(Mapping[str, Any]):
    """Immutable view over process variables with typed lookups."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TaskVariables({dict(self._values)!r})"

    def _wrong_type(self, name: str, expected: str, value: Any) -> TaskVariableError:
        return TaskVariableError(
            f"Process variable '{name}' must be {expected}, got {type(value).__name__}"
        )

    @beartype
    def get_str(self, name: str) -> str | None:
        """String variable, ``None`` when absent."""
        value = self._values.get(name)
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._wrong_type(name, "a string", value)
        return value

    @beartype
    def get_int(self, name: str) -> int | None:
        """Integer variable; integral strings and floats are accepted."""
        value = self._values.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            raise self._wrong_type(name, "an integer", value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise TaskVariableError(
                    f"Process variable '{name}' must be an integer, got '{value}'"
                ) from None
        raise self._wrong_type(name, "an integer", value)

    @beartype
    def get_decimal(self, name: str) -> Decimal | None:
        """Decimal variable built from its string form, so 0.1 stays 0.1."""
        value = self._values.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            raise self._wrong_type(name, "a number", value)
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, float, str)):
            try:
                result = Decimal(str(value).strip())
            except InvalidOperation:
                raise TaskVariableError(
                    f"Process variable '{name}' must be a number, got '{value}'"
                ) from None
            if not result.is_finite():
                raise TaskVariableError(f"Process variable '{name}' must be finite")
            return result
        raise self._wrong_type(name, "a number", value)

    @beartype
    def get_date(self, name: str) -> date | None:
        """Date variable; datetimes are truncated, ISO strings parsed."""
        value = self._values.get(name)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip()).date()
            except ValueError:
                raise TaskVariableError(
                    f"Process variable '{name}' must be an ISO date, got '{value}'"
                ) from None
        raise self._wrong_type(name, "a date", value)
