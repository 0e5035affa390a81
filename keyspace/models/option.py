"""
Present/Absent representation for optional parameters.

Every nullable input of the public API is passed as ``Present(value)`` or
``ABSENT``. A bare ``None`` is rejected so that "no constraint" can never be
confused with a constraint whose value happens to be zero or empty.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Present(Generic[T]):
    """An optional parameter that carries a value."""

    value: T

    @property
    def is_present(self) -> bool:
        return True


class Absent:
    """An optional parameter that carries nothing. Use the ``ABSENT`` singleton."""

    _instance: "Absent | None" = None

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def is_present(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent()

Option = Union[Present[T], Absent]


def ensure_option(option: Any, name: str) -> "Option[Any]":
    """
    Validate that a parameter follows the Present/Absent convention.

    Args:
        option: The value passed by the caller.
        name: Parameter name, used in the error message.

    Returns:
        The option unchanged.

    Raises:
        TypeError: If option is neither Present nor Absent.
    """
    if not isinstance(option, (Present, Absent)):
        raise TypeError(
            f"{name} must be Present(...) or ABSENT, got {type(option).__name__}"
        )
    return option


def unwrap_or(option: "Option[T]", default: Any = None) -> Any:
    """Return the carried value, or default when absent."""
    if isinstance(option, Present):
        return option.value
    return default
