# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-20
# Description: MPRowStore
# -----------------------------------------------------------------------------

from typing import Protocol, Any, Dict, List, runtime_checkable


@runtime_checkable
class MPRowStore(Protocol):
    """
    Parameterised-statement interface over the relational store.

    Statements use $1..$n placeholders. The store must support a
    vector(768) column with the `<=>` cosine-distance operator and ILIKE.
    """

    async def test_connection(self) -> bool:
        ...

    async def fetch(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        ...

    async def execute(self, sql: str, *params: Any) -> int:
        """Run a statement and return the affected row count."""
        ...

    async def close(self) -> None:
        ...
