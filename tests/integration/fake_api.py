"""In-process fake API served through ``httpx.MockTransport``.

The API issues session tokens through ``/auth/refresh`` and rejects
every other call with 401 while the session is expired. Tests drive
expiry and refresh failures directly on the instance.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

import httpx

REFRESH_PATH = "/auth/refresh"

PRODUCTS = [
    {"id": 1, "title": "Desk Lamp", "price": 29.5},
    {"id": 2, "title": "Notebook", "price": 4.0},
]


class FakeApi:
    def __init__(self):
        self.session_valid = False
        self.token = 0
        self.refresh_status: Optional[int] = None
        self.refresh_gate: Optional[asyncio.Event] = None
        self.calls: List[Tuple[str, str]] = []

    @property
    def refresh_calls(self) -> int:
        return sum(1 for _, path in self.calls if path == REFRESH_PATH)

    def paths(self) -> List[str]:
        return [path for _, path in self.calls]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path == REFRESH_PATH:
            return await self._refresh()

        if not self.session_valid:
            return httpx.Response(401, json={"message": "Session expired", "status": 401})

        if path == "/products":
            return httpx.Response(200, json=PRODUCTS)
        if path.startswith("/products/"):
            product_id = int(path.rsplit("/", 1)[-1])
            for product in PRODUCTS:
                if product["id"] == product_id:
                    return httpx.Response(200, json=product)
            return httpx.Response(404, json={"message": "Not Found"})
        if path.startswith("/orders"):
            return httpx.Response(200, json={"path": path, "token": self.token})
        return httpx.Response(404, json={"message": "Not Found"})

    async def _refresh(self) -> httpx.Response:
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        if self.refresh_status is not None:
            body: Dict[str, object] = {"message": "Refresh token revoked"}
            return httpx.Response(self.refresh_status, json=body)
        self.token += 1
        self.session_valid = True
        return httpx.Response(200, json={"token": self.token})
