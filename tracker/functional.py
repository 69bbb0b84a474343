from abc import ABC, abstractmethod
from typing import Generic, Iterable, Optional, TypeVar

from tracker.domain import Category, UNCATEGORIZED
from tracker.schemas import RecordError, parse_record

T = TypeVar('T')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False


class Either(Generic[E, T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error


def find_category(cats: Iterable[Category], cat_id: Optional[str]) -> Maybe[Category]:
    if not cat_id:
        return Nothing()
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def resolve_category(cats: Iterable[Category], cat_id: Optional[str]) -> Category:
    """Category for display; unknown or missing ids give the Uncategorized sentinel."""
    return find_category(cats, cat_id).get_or_else(UNCATEGORIZED)


def validate_record(kind: str, raw: dict) -> Either[dict, object]:
    try:
        return Right(parse_record(kind, raw))
    except RecordError as e:
        return Left({
            "error": f"invalid_{kind}",
            "message": str(e),
            "record_id": raw.get("id") if isinstance(raw, dict) else None,
        })
