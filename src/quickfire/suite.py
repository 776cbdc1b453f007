"""In-code suite builder: collects ``TestUnit`` objects in declaration order."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from quickfire.domain.models import TestBody, TestUnit


class Suite:
    """Ordered collection of test units sharing an optional location prefix."""

    __slots__ = ("_location", "_units")

    def __init__(self, location: str | None = None) -> None:
        self._location = location
        self._units: list[TestUnit] = []

    @property
    def location(self) -> str | None:
        return self._location

    @property
    def units(self) -> tuple[TestUnit, ...]:
        return tuple(self._units)

    def add(self, name: str, body: TestBody, *, location: str | None = None) -> TestUnit:
        unit = TestUnit(name=name, body=body, location=location or self._location)
        self._units.append(unit)
        return unit

    def test(self, name: str) -> Callable[[TestBody], TestBody]:
        """Decorator registering the wrapped function as a unit named ``name``."""

        def decorator(body: TestBody) -> TestBody:
            self.add(name, body)
            return body

        return decorator

    def extend(self, units: Iterable[TestUnit]) -> None:
        for unit in units:
            if not isinstance(unit, TestUnit):
                raise TypeError(f"expected TestUnit, got {type(unit).__name__}")
            self._units.append(unit)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[TestUnit]:
        return iter(tuple(self._units))


__all__ = ["Suite"]
