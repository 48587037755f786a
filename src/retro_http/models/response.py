"""Result models returned to callers"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying decoded data"""
    status_code: Optional[int]
    data: T

    @property
    def is_successful(self) -> bool:
        return True

    @property
    def as_body(self) -> T:
        return self.data


@dataclass(frozen=True)
class Failure:
    """Business failure: the server answered with an error payload"""
    status_code: Optional[int]
    error: Any

    @property
    def is_successful(self) -> bool:
        return False

    @property
    def as_error(self) -> Any:
        return self.error


ResultOutcome = Union[Success[T], Failure]


@dataclass(frozen=True)
class RawResult:
    """
    Untyped outcome of ``call`` and ``form_data_call``

    Exposes both ``data`` and ``error``; exactly one of them is meaningful
    depending on ``successful``.
    """
    status_code: Optional[int]
    data: Any = None
    error: Any = None
    successful: bool = True

    @classmethod
    def success(cls, status_code: Optional[int], data: Any) -> "RawResult":
        return cls(status_code=status_code, data=data, successful=True)

    @classmethod
    def failure(cls, status_code: Optional[int], error: Any) -> "RawResult":
        return cls(status_code=status_code, error=error, successful=False)

    @property
    def is_successful(self) -> bool:
        return self.successful

    @property
    def as_body(self) -> Any:
        return self.data

    @property
    def as_error(self) -> Any:
        return self.error

    def to_outcome(self) -> ResultOutcome[Any]:
        """Convert to the Success/Failure union without decoding"""
        if self.successful:
            return Success(status_code=self.status_code, data=self.data)
        return Failure(status_code=self.status_code, error=self.error)


@dataclass(frozen=True)
class TransportResponse:
    """Successful response as produced by a transport"""
    status_code: int
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
