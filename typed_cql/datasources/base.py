"""Base data source interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pyarrow as pa


class CatalogUnavailableError(Exception):
    """Raised when the schema catalog cannot be reached or queried."""

    pass


class DataSource(ABC):
    """Abstract base class for query execution against a schema catalog."""

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize data source.

        Args:
            name: Unique name for this data source
            config: Configuration dictionary
        """
        self.name = name
        self.config = config
        self.connection = None
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the data source."""
        pass

    @abstractmethod
    def execute_query(
        self, query: str, params: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        """Execute a query and return results as Arrow record batches.

        Args:
            query: Query string
            params: Positional values for `?` placeholders

        Returns:
            Iterator of Arrow record batches

        Raises:
            CatalogUnavailableError: If the query cannot be executed
        """
        pass

    def fetch_rows(
        self, query: str, params: Optional[Sequence[Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute a query and collect every row as a dict keyed by column name."""
        self.ensure_connected()
        rows: List[Dict[str, Any]] = []
        for batch in self.execute_query(query, params):
            rows.extend(batch.to_pylist())
        return rows

    def is_connected(self) -> bool:
        """Check if data source is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    def ensure_connected(self) -> None:
        """Ensure data source is connected.

        Raises:
            CatalogUnavailableError: If connection cannot be established
        """
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        """Context manager entry."""
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
