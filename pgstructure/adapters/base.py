"""Base database adapter interface"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Protocol, Sequence

from pgstructure.models.structure import StructureDocument


class CatalogConnection(Protocol):
    """
    What the extraction core needs from a connection.

    ``asyncpg.Connection`` satisfies this protocol as-is.
    """

    async def fetch(self, query: str, *args: Any) -> Sequence[Mapping[str, Any]]:
        """Run a parameterized query and return its rows"""
        ...

    async def execute(self, query: str, *args: Any) -> Any:
        """Run a command that returns no rows"""
        ...


class DatabaseAdapter(ABC):
    """Abstract base class for database adapters"""

    @abstractmethod
    async def connect(self) -> None:
        """Establish database connection"""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close database connection"""
        pass

    @abstractmethod
    async def introspect_structure(self) -> StructureDocument:
        """Introspect and return the database structure"""
        pass

    async def __aenter__(self) -> "DatabaseAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
