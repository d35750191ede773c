# crudsuite/client/api.py
from typing import Any, Dict, Optional

import httpx

from crudsuite.client.session import ClientSession


class ApiError(Exception):
    """Non-2xx response; ``message`` is the server's text as sent."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


def _message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return resp.text


class ApiClient:
    # transport lets tests route requests straight into an ASGI app
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 20):
        self.transport = transport
        self.timeout = timeout

    async def request(self, session: ClientSession, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(session.auth_headers())
        async with httpx.AsyncClient(base_url=session.base_url, transport=self.transport, timeout=self.timeout) as client:
            resp = await client.request(method, path, headers=headers, **kwargs)
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _message(resp))
        if not resp.content:
            return None
        return resp.json()

    async def get(self, session: ClientSession, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        return await self.request(session, "GET", path, params=params)

    async def post(self, session: ClientSession, path: str, json: Any = None) -> Any:
        return await self.request(session, "POST", path, json=json)

    async def put(self, session: ClientSession, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request(session, "PUT", path, json=json, **kwargs)

    async def delete(self, session: ClientSession, path: str) -> Any:
        return await self.request(session, "DELETE", path)
