"""
HTTP transport backed by requests.

requests is blocking, so each call runs in the loop's default executor and
the coroutine resumes on the event loop when the response is in.
"""

import asyncio
import logging
from functools import partial
from typing import Dict, Optional

import requests

from ..core.annotation.collaborators import Response, Transport
from ..core.annotation.errors import TransportError

logger = logging.getLogger(__name__)


class RequestsTransport(Transport):
    """Transport using a shared requests.Session. No timeout, no retries."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Response:
        """Blocking request."""
        data = body.encode("utf-8") if body is not None else None
        try:
            resp = self.session.request(method.upper(), url, headers=headers, data=data)
        except requests.exceptions.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError(str(e)) from e
        return Response(status=resp.status_code, body=resp.text, headers=dict(resp.headers))

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Response:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(self.send, method, url, headers=headers, body=body)
        )
