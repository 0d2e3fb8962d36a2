from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from ..exceptions import ErrorKind, UploadError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    ok: bool = False

    @classmethod
    def from_error(cls, error: UploadError) -> "Failure":
        return cls(kind=error.kind, message=error.message)


Outcome = Union[Success[T], Failure]
