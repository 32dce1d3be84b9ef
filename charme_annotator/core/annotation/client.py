"""
Client for the remote CHARMe node.

Wraps the node's endpoints (annotation insert, SPARQL query, user info and
OAuth authorization) over a Transport.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from .collaborators import Response, Transport
from .errors import AuthenticationError, RemoteServiceError, TransportError
from .state import UserDetails

logger = logging.getLogger(__name__)


def normalize_endpoint(url: str) -> str:
    """Endpoint URLs always end with a slash so paths can be appended."""
    return url if url.endswith("/") else url + "/"


def encode_uri_component(text: str) -> str:
    """Percent-encode like the browser's encodeURIComponent."""
    return quote(text, safe="-_.!~*'()")


class CharmeNodeClient:
    """Remote annotation, query and user-info service."""

    def __init__(self, endpoint_url: str, transport: Transport):
        self.endpoint_url = normalize_endpoint(endpoint_url)
        self.transport = transport

    # URLs

    @property
    def insert_url(self) -> str:
        return self.endpoint_url + "insert/annotation"

    @property
    def userinfo_url(self) -> str:
        return self.endpoint_url + "token/userinfo"

    @property
    def authorize_endpoint(self) -> str:
        return self.endpoint_url + "oauth2/authorize"

    def query_url(self, query_text: str) -> str:
        return (
            self.endpoint_url
            + "sparql?format=GeoJSON&query="
            + encode_uri_component(query_text)
        )

    def authorization_url(self, client_id: str, redirect_uri: str, state: str) -> str:
        """URL of the provider's implicit-grant authorization page."""
        params = {
            "response_type": "token",
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "state": state,
        }
        return self.authorize_endpoint + "?" + urlencode(params)

    # Calls

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        if not token:
            raise AuthenticationError("Not logged in to the CHARMe node")
        return {"Authorization": f"Token {token}"}

    async def _send(self, method: str, url: str, **kwargs) -> Response:
        logger.debug("%s %s", method.upper(), url)
        response = await self.transport.request(method, url, **kwargs)
        if not response.ok:
            raise RemoteServiceError(response.status, url, response.body)
        return response

    async def insert_annotation(self, document: str, token: Optional[str]) -> Response:
        """
        POST a Turtle document to the node.

        Raises:
            AuthenticationError: If ``token`` is absent; nothing is sent
            TransportError: On network failure or non-2xx status
        """
        headers = {"Content-Type": "text/turtle"}
        headers.update(self._auth_headers(token))
        return await self._send("post", self.insert_url, headers=headers, body=document)

    async def query(self, query_text: str) -> Dict[str, Any]:
        """
        Run a SPARQL query and return the GeoJSON feature collection.

        Raises:
            TransportError: On network failure, non-2xx status or a body
                that is not JSON
        """
        response = await self._send(
            "get",
            self.query_url(query_text),
            headers={"Accept": "application/json"},
        )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Query response is not JSON: {e}") from e

    async def user_info(self, token: Optional[str]) -> UserDetails:
        """Fetch the identity behind ``token``."""
        response = await self._send(
            "get", self.userinfo_url, headers=self._auth_headers(token)
        )
        try:
            return UserDetails.from_dict(response.json())
        except ValueError as e:
            raise TransportError(f"User info response is not JSON: {e}") from e
