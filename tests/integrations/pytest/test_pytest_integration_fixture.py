"""Tests for the autowire_container pytest fixture."""

from __future__ import annotations

from abc import ABC, abstractmethod

from autowire.container import Container

pytest_plugins = ["autowire.integrations.pytest_plugin"]

_seen: list[Container] = []


class IClock(ABC):
    @abstractmethod
    def now(self) -> int: ...


class FixedClock(IClock):
    def now(self) -> int:
        return 0


class Scheduler:
    def __init__(self, clock: IClock) -> None:
        self.clock = clock


def test_fixture_provides_container(autowire_container: Container) -> None:
    scheduler = autowire_container.resolve(Scheduler)

    assert isinstance(scheduler.clock, FixedClock)
    assert scheduler is autowire_container.resolve(Scheduler)
    _seen.append(autowire_container)


def test_fixture_is_fresh_per_test(autowire_container: Container) -> None:
    _seen.append(autowire_container)

    assert len(_seen) in (1, 2)
    assert len(set(map(id, _seen))) == len(_seen)
