"""
Interfaces of the external collaborators.

The core talks to the map, the HTTP stack and the token cache only through
these classes; adapters in ``charme_annotator.interfaces`` implement them.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .state import AnnotationRecord, Bounds, Token


@dataclass
class Response:
    """Status and body of an HTTP exchange."""

    status: int
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)


class Transport(ABC):
    """Sends one HTTP request and resolves with the response."""

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Response:
        """
        Raises:
            TransportError: If no response could be obtained
        """


class TokenStore(ABC):
    """Persisted OAuth token cache."""

    @abstractmethod
    def load(self) -> Optional[Token]:
        """Cached token, or None."""

    @abstractmethod
    def save(self, token: Token) -> None:
        """Replace the cached token."""

    @abstractmethod
    def wipe(self) -> None:
        """Forget the cached token."""


class MapSurface(ABC):
    """
    The map the annotations are drawn on.

    Layers are opaque objects created by the surface itself.
    """

    @abstractmethod
    def on_draw_created(self, handler: Callable[[Any], None]) -> None:
        """Call ``handler(shape)`` with a Point/Polygon whenever a shape is drawn."""

    @abstractmethod
    def set_drawing_enabled(self, enabled: bool) -> None:
        """Show or hide the drawing toolbar."""

    @abstractmethod
    def get_bounds(self) -> Bounds:
        """Current viewport."""

    @abstractmethod
    def shape_layer(self, shape) -> Any:
        """Layer outlining a freshly drawn shape."""

    @abstractmethod
    def annotation_layer(self, record: AnnotationRecord, popup_html: Optional[str]) -> Any:
        """Layer for a stored annotation, with its popup."""

    @abstractmethod
    def add_layer(self, layer) -> None:
        pass

    @abstractmethod
    def remove_layer(self, layer) -> None:
        pass

    @abstractmethod
    def open_comment_form(
        self,
        layer,
        on_submit: Callable[[str], None],
        on_dismiss: Callable[[], None],
    ) -> None:
        """
        Open an inline comment form over ``layer``.

        Exactly one of the callbacks is invoked: ``on_submit(comment)`` when
        the form is submitted, ``on_dismiss()`` when it is closed without
        submitting. The form is closed by the surface in both cases.
        """
