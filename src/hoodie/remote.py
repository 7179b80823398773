"""Remote store: a named database on the Hoodie server."""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import quote

from hoodie.utils import PendingRequest

if TYPE_CHECKING:
    from hoodie.client import HoodieClient


class RemoteStore:
    """Requests scoped to one store (CouchDB database) on the server.

    Returned by ``HoodieClient.open``.
    """

    def __init__(
        self,
        client: HoodieClient,
        name: str,
        prefix: Optional[str] = None,
    ) -> None:
        """Initialize remote store.

        Args:
            client: Client the store talks through
            name: Store name
            prefix: Path prefix, defaults to the URL-quoted store name
        """
        self.client = client
        self.name = name
        self.prefix = prefix if prefix is not None else "/" + quote(name, safe="")

    def __repr__(self) -> str:
        return f"RemoteStore(name={self.name!r}, prefix={self.prefix!r})"

    def request(self, method: str, path: str = "", **options: Any) -> PendingRequest:
        """Send a request relative to the store's prefix."""
        return self.client.request(method, f"{self.prefix}{path}", **options)

    def find(self, doc_id: str) -> PendingRequest:
        """Fetch one document by id."""
        return self.request("GET", "/" + quote(doc_id, safe=""))

    def find_all(self) -> PendingRequest:
        """Fetch all documents in the store."""
        return PendingRequest(self._find_all(), name=f"find_all {self.name}")

    async def _find_all(self) -> List[Dict[str, Any]]:
        response = await self.request(
            "GET", "/_all_docs", params={"include_docs": "true"}
        )
        rows = (response or {}).get("rows", [])
        return [row["doc"] for row in rows if "doc" in row]
