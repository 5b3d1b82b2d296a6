from dataclasses import dataclass
from typing import Any, Optional

from hut.errors import AppError


@dataclass
class Outcome:
    """Result of work done under the write lock.

    Mutators return one of these instead of raising, so expected failures never
    cross the store boundary as exceptions. ``unwrap`` turns a failure into an
    ``AppError`` once the caller is back outside the lock.
    """

    value: Any = None
    error: Optional[str] = None
    status_code: int = 400

    @property
    def ok(self):
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def failure(cls, message, status_code=400):
        return cls(error=message, status_code=status_code)

    def unwrap(self):
        if self.error is not None:
            raise AppError(self.error, self.status_code)
        return self.value
