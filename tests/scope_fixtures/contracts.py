from abc import ABC, abstractmethod


class ISharedService(ABC):
    """Implemented once in ``assembly_a`` and once in ``assembly_b``."""

    @abstractmethod
    def origin(self) -> str: ...
