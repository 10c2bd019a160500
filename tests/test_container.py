"""Tests for Container.resolve end to end."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated, Protocol

import pytest

from autowire import constructor
from autowire.container import Container
from autowire.exceptions import (
    AutowireConstructionFailedError,
    AutowireError,
    AutowireTypeMismatchError,
)


class ServiceA:
    pass


class ServiceB:
    def __init__(self, a: ServiceA) -> None:
        self.a = a


class ServiceC:
    def __init__(self, a: ServiceA, b: ServiceB) -> None:
        self.a = a
        self.b = b


class IMessageSender(ABC):
    @abstractmethod
    def send(self, message: str) -> str: ...


class EmailSender(IMessageSender):
    def send(self, message: str) -> str:
        return f"email: {message}"


class INotifier(Protocol):
    def notify(self) -> str: ...


class PushNotifier(INotifier):
    def notify(self) -> str:
        return "push"


class BaseHandler(ABC):
    """Declared abstract by listing ABC directly, without abstract methods."""


class DefaultHandler(BaseHandler):
    pass


class NotificationService:
    def __init__(self, sender: IMessageSender, notifier: INotifier) -> None:
        self.sender = sender
        self.notifier = notifier


@dataclass
class ReportBuilder:
    sender: IMessageSender
    service: NotificationService


class Part:
    pass


class Widget:
    def __init__(self) -> None:
        pass

    @classmethod
    @constructor
    def assemble(cls, part: Part) -> Widget:
        return part  # type: ignore[return-value]


class Gadget:
    def __init__(self) -> None:
        pass

    @classmethod
    @constructor
    def assemble(cls, part: Part) -> Gadget | None:
        return None


class TestResolveConcreteTypes:
    def test_resolve_class_without_dependencies(self, container: Container) -> None:
        """Class without dependencies is constructed."""
        instance = container.resolve(ServiceA)

        assert isinstance(instance, ServiceA)

    def test_resolve_nested_dependencies(self, container: Container) -> None:
        """Dependencies are resolved recursively."""
        instance = container.resolve(ServiceC)

        assert isinstance(instance.a, ServiceA)
        assert isinstance(instance.b, ServiceB)
        assert instance.b.a is instance.a

    def test_resolve_dataclass(self, container: Container) -> None:
        """Dataclass fields are injected through the generated __init__."""
        builder = container.resolve(ReportBuilder)

        assert isinstance(builder.sender, EmailSender)
        assert builder.service.sender is builder.sender

    def test_resolve_annotated_type(self, container: Container) -> None:
        """Annotated metadata is ignored."""
        instance = container.resolve(Annotated[ServiceA, "meta"])

        assert instance is container.resolve(ServiceA)


class TestResolveInterfaces:
    def test_resolve_abstract_class_to_implementation(self, container: Container) -> None:
        """Abstract class maps to its single implementation."""
        sender = container.resolve(IMessageSender)

        assert isinstance(sender, EmailSender)
        assert sender.send("hi") == "email: hi"

    def test_resolve_protocol_to_explicit_implementation(self, container: Container) -> None:
        """Protocol maps to a class that lists it as a base."""
        notifier = container.resolve(INotifier)

        assert isinstance(notifier, PushNotifier)

    def test_resolve_class_with_abc_base_without_abstract_methods(
        self,
        container: Container,
    ) -> None:
        """Class deriving directly from ABC is treated as an interface."""
        handler = container.resolve(BaseHandler)

        assert type(handler) is DefaultHandler

    def test_interface_and_implementation_share_singleton(self, container: Container) -> None:
        """Requesting the interface or the implementation yields the same singleton."""
        via_interface = container.resolve(IMessageSender)
        via_implementation = container.resolve(EmailSender)

        assert via_interface is via_implementation

    def test_interface_dependencies_are_injected(self, container: Container) -> None:
        """Constructor parameters typed as interfaces are discovered."""
        service = container.resolve(NotificationService)

        assert isinstance(service.sender, EmailSender)
        assert isinstance(service.notifier, PushNotifier)


class TestContainerIsolation:
    def test_containers_do_not_share_singletons(self) -> None:
        """Each container has its own singleton cache."""
        first = Container().resolve(ServiceA)
        second = Container().resolve(ServiceA)

        assert first is not second

    def test_container_usable_after_failure(self, container: Container) -> None:
        """A failed resolve leaves the container usable."""
        with pytest.raises(AutowireError):
            container.resolve(int)

        assert isinstance(container.resolve(ServiceB), ServiceB)


class TestConstructorResults:
    def test_constructor_returning_other_type_raises_type_mismatch(
        self,
        container: Container,
    ) -> None:
        """Top-level result that is not an instance of the request is rejected."""
        with pytest.raises(AutowireTypeMismatchError) as exc_info:
            container.resolve(Widget)

        assert exc_info.value.requested is Widget
        assert isinstance(exc_info.value.instance, Part)
        assert "Failed to cast" in str(exc_info.value)

    def test_constructor_returning_none_raises(self, container: Container) -> None:
        """Constructor returning None is a construction failure."""
        with pytest.raises(AutowireConstructionFailedError) as exc_info:
            container.resolve(Gadget)

        assert exc_info.value.service is Gadget
        assert "returned None" in str(exc_info.value)
