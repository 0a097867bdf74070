from typing import Generic, TypeVar, Optional, Callable, cast
from dataclasses import dataclass

T = TypeVar('T')
E = TypeVar('E', bound=Exception)
U = TypeVar('U')


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Result type for explicit error handling without exceptions"""
    _value: Optional[T] = None
    _error: Optional[E] = None

    def __post_init__(self):
        # Ensure exactly one of value or error is set
        if (self._value is None) == (self._error is None):
            raise ValueError("Result must have exactly one of value or error")

    @classmethod
    def success(cls, value: T) -> 'Result[T, E]':
        """Create a successful result"""
        return cls(_value=value)

    @classmethod
    def failure(cls, error: E) -> 'Result[T, E]':
        """Create a failed result"""
        return cls(_error=error)

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def is_failure(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        """Get the success value (raises ValueError if result is failure)"""
        if self.is_failure:
            raise ValueError("Cannot get value from failed result")
        return cast(T, self._value)

    @property
    def error(self) -> E:
        """Get the error (raises ValueError if result is success)"""
        if self.is_success:
            raise ValueError("Cannot get error from successful result")
        return cast(E, self._error)

    def map(self, func: Callable[[T], U]) -> 'Result[U, E]':
        """Transform the success value while preserving failure"""
        if self.is_success:
            return Result.success(func(cast(T, self._value)))
        return Result.failure(cast(E, self._error))

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization"""
        if self.is_success:
            return {'success': True, 'value': self._value, 'error': None}
        error = cast(E, self._error)
        error_dict = error.to_dict() if hasattr(error, 'to_dict') else str(error)
        return {'success': False, 'value': None, 'error': error_dict}

    def __str__(self) -> str:
        if self.is_success:
            return f"Success({self._value})"
        return f"Failure({self._error})"

    def __repr__(self) -> str:
        return self.__str__()
