"""Result types for remote-facing service calls.

Services never let transport errors escape. They return ``Ok(value)`` when
the remote call produced an answer, ``Ok(None)`` included when the entity
does not exist, and ``Err(message)`` when it did not answer. Callers branch
with ``isinstance(result, Err)`` and decide whether the outcome is fatal.
"""

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from attrs import frozen

T = TypeVar("T")
E = TypeVar("E")


@frozen
class Ok(Generic[T]):
    """Remote call answered."""

    value: T


@frozen
class Err(Generic[E]):
    """Remote call failed, or the service is not configured."""

    error: E


if TYPE_CHECKING:
    Result = Ok[T] | Err[E]
else:

    class Result(Generic[T, E]):
        """Annotation helper: ``Result[T, E]`` means ``Ok[T] | Err[E]``."""

        def __class_getitem__(cls, params: Any) -> Any:
            return Ok[Any] | Err[Any]
