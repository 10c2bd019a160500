"""Tests for circular dependency detection."""

from __future__ import annotations

from abc import ABC, abstractmethod

import pytest

from autowire.container import Container
from autowire.exceptions import AutowireCircularDependencyError


class CycleA:
    def __init__(self, b: CycleB) -> None:
        self.b = b


class CycleB:
    def __init__(self, a: CycleA) -> None:
        self.a = a


class SelfReferencing:
    def __init__(self, other: SelfReferencing) -> None:
        self.other = other


class First:
    def __init__(self, second: Second) -> None:
        self.second = second


class Second:
    def __init__(self, third: Third) -> None:
        self.third = third


class Third:
    def __init__(self, first: First) -> None:
        self.first = first


class IPing(ABC):
    @abstractmethod
    def ping(self) -> str: ...


class IPong(ABC):
    @abstractmethod
    def pong(self) -> str: ...


class Ping(IPing):
    def __init__(self, pong: IPong) -> None:
        self._pong = pong

    def ping(self) -> str:
        return "ping"


class Pong(IPong):
    def __init__(self, ping: IPing) -> None:
        self._ping = ping

    def pong(self) -> str:
        return "pong"


class Leaf:
    pass


class Standalone:
    pass


class Diamond:
    """Reaches Leaf twice without a cycle."""

    def __init__(self, left: LeftBranch, right: RightBranch) -> None:
        self.left = left
        self.right = right


class LeftBranch:
    def __init__(self, leaf: Leaf) -> None:
        self.leaf = leaf


class RightBranch:
    def __init__(self, leaf: Leaf) -> None:
        self.leaf = leaf


class TestCircularDependencyDetection:
    def test_two_type_cycle(self, container: Container) -> None:
        """A -> B -> A is reported with its chain."""
        with pytest.raises(AutowireCircularDependencyError) as exc_info:
            container.resolve(CycleA)

        error = exc_info.value
        assert error.service is CycleA
        assert error.chain == (CycleA, CycleB, CycleA)
        assert "Circular dependency detected" in str(error)
        assert "Resolution chain: CycleA -> CycleB -> CycleA" in str(error)

    def test_self_dependency(self, container: Container) -> None:
        """Type depending on itself is a cycle of length one."""
        with pytest.raises(AutowireCircularDependencyError) as exc_info:
            container.resolve(SelfReferencing)

        assert exc_info.value.chain == (SelfReferencing, SelfReferencing)

    def test_three_type_cycle(self, container: Container) -> None:
        """Longer cycles report every type in order."""
        with pytest.raises(AutowireCircularDependencyError) as exc_info:
            container.resolve(Second)

        assert exc_info.value.chain == (Second, Third, First, Second)

    def test_cycle_through_interfaces(self, container: Container) -> None:
        """Cycles are detected on implementations reached through interfaces."""
        with pytest.raises(AutowireCircularDependencyError) as exc_info:
            container.resolve(IPing)

        assert exc_info.value.chain == (Ping, Pong, Ping)

    def test_shared_dependency_is_not_a_cycle(self, container: Container) -> None:
        """Reaching a type twice on separate branches is fine."""
        diamond = container.resolve(Diamond)

        assert diamond.left.leaf is diamond.right.leaf


class TestRecoveryAfterCycle:
    def test_same_cycle_is_reported_again(self, container: Container) -> None:
        """No stale entries stay on the stack after a failure."""
        for _ in range(3):
            with pytest.raises(AutowireCircularDependencyError) as exc_info:
                container.resolve(CycleA)
            assert exc_info.value.chain == (CycleA, CycleB, CycleA)

    def test_unrelated_resolution_after_cycle(self, container: Container) -> None:
        """Container keeps working after a cycle error."""
        with pytest.raises(AutowireCircularDependencyError):
            container.resolve(CycleB)

        first = container.resolve(Standalone)

        assert container.resolve(Standalone) is first
        assert isinstance(container.resolve(Diamond), Diamond)
