from autowire import Container
from scope_fixtures.contracts import ISharedService


class SharedServiceB(ISharedService):
    def origin(self) -> str:
        return __name__


class ConsumerB:
    def __init__(self, service: ISharedService) -> None:
        self.service = service


def resolve_shared_service(container: Container) -> ISharedService:
    return container.resolve(ISharedService)
