"""
Core interfaces and abstract base classes for the CCRM platform.
"""

from abc import ABC, abstractmethod
from typing import List, TypeVar, Generic


T = TypeVar('T')


class Persistable(ABC):
    """Interface for entities that can be written as a CSV row."""

    @abstractmethod
    def to_csv_row(self) -> List[str]:
        """Get the fields of this entity in CSV column order."""
        pass


class Searchable(ABC, Generic[T]):
    """Interface for catalogs that support free-text search."""

    @abstractmethod
    def search(self, query: str) -> List[T]:
        """Get all items matching the query."""
        pass
