from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import ValidationRejected


@dataclass(frozen=True)
class Applied:
    """The operation ran. ``record`` is None when nothing matched (silent no-op)."""

    record: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return True

    @property
    def changed(self) -> bool:
        return self.record is not None

    def unwrap(self) -> Optional[Any]:
        return self.record


@dataclass(frozen=True)
class Rejected:
    """The operation was refused; state is untouched."""

    error: ValidationRejected

    @property
    def ok(self) -> bool:
        return False

    @property
    def changed(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


OperationResult = Union[Applied, Rejected]
