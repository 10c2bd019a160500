from scope_fixtures.proximity.contracts import IProximityService


class ServiceInModule2(IProximityService):
    def location(self) -> str:
        return "module2"
