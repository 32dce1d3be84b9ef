"""
Ready-made annotator.

Wires the session manager and the controller to a map surface from a
configuration tree, and exposes the calls a page or notebook needs.

Usage:
    from ipyleaflet import Map
    from charme_annotator.annotator import CharmeAnnotator
    from charme_annotator.interfaces.leaflet_adapter import LeafletMapSurface

    m = Map(center=(40, 0), zoom=3)
    annotator = CharmeAnnotator.from_config(LeafletMapSurface(m))
    await annotator.start()
    annotator.select_dataset("http://host/ncWMS2/wms/cci", "analysed_sst")
    annotator.toggle_annotations()
"""

import logging
from typing import Callable, Optional

from easydict import EasyDict as edict

from .core.annotation import (
    AnnotationController,
    CharmeNodeClient,
    EventType,
    MapSurface,
    SessionManager,
    TokenStore,
    Transport,
)
from .utils.config import load_config

logger = logging.getLogger(__name__)


class CharmeAnnotator:
    """Session manager and controller bound to one map."""

    def __init__(self, session: SessionManager, controller: AnnotationController):
        self.session = session
        self.controller = controller

    @classmethod
    def from_config(
        cls,
        map_surface: MapSurface,
        cfg: Optional[edict] = None,
        transport: Optional[Transport] = None,
        token_store: Optional[TokenStore] = None,
        open_url: Optional[Callable[[str], object]] = None,
    ) -> "CharmeAnnotator":
        """
        Build an annotator.

        Args:
            map_surface: Map to annotate
            cfg: Configuration (default: load_config())
            transport: HTTP transport (default: RequestsTransport)
            token_store: Token cache (default: FileTokenStore at cfg.token.path)
            open_url: Opens the authorization page on login
        """
        if cfg is None:
            cfg = load_config()
        if transport is None:
            from .interfaces.http import RequestsTransport

            transport = RequestsTransport()
        if token_store is None:
            from .interfaces.token_store import FileTokenStore

            token_store = FileTokenStore(cfg.token.path)

        client = CharmeNodeClient(cfg.node.url, transport)
        session = SessionManager(
            client,
            token_store,
            client_id=cfg.node.client_id,
            redirect_uri=cfg.node.redirect_uri,
            open_url=open_url,
        )
        controller = AnnotationController(
            map_surface,
            session,
            client,
            query_mode=cfg.query.mode,
            query_limit=cfg.query.limit,
        )
        return cls(session, controller)

    async def start(self, redirect_url: Optional[str] = None) -> bool:
        """
        Pick up an existing login.

        Args:
            redirect_url: The provider's redirect, when returning from login

        Returns:
            True if logged in
        """
        if redirect_url:
            self.session.handle_redirect(redirect_url)
        return await self.session.check_cached_token()

    def on(self, event_type: EventType, callback):
        """Subscribe to session or controller events."""
        if event_type in (EventType.LOGIN, EventType.LOGOUT, EventType.USER_INFO_FAILED):
            self.session.events.on(event_type, callback)
        else:
            self.controller.events.on(event_type, callback)

    def login(self) -> str:
        return self.session.login()

    def logout(self):
        self.session.logout()

    def select_dataset(self, uri: str, variable: str):
        return self.controller.select_dataset(uri, variable)

    def set_dataset_details(self, uri: str, variable: str):
        self.controller.set_dataset_details(uri, variable)

    def toggle_annotations(self):
        return self.controller.toggle_annotations()

    def is_annotations_on(self) -> bool:
        return self.controller.is_annotations_on()

    def set_annotation_formatter(self, formatter):
        self.controller.set_annotation_formatter(formatter)
