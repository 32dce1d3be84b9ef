"""
Core annotation module - UI-agnostic annotation logic.

This module provides the geometry encoder, the Turtle and SPARQL builders,
the OAuth session manager and the controller tying them to a map surface.
"""

from .controller import AnnotationController
from .client import CharmeNodeClient
from .collaborators import MapSurface, Response, TokenStore, Transport
from .errors import (
    AuthenticationError,
    CharmeError,
    DatasetNotSelectedError,
    GeometryError,
    PreconditionError,
    RemoteServiceError,
    TransportError,
)
from .events import AnnotationEvent, EventType, EventEmitter
from .geometry import Point, Polygon, encode, shape_from_geojson
from .session import SessionManager
from .state import (
    AnnotationDraft,
    AnnotationRecord,
    Bounds,
    DatasetSelection,
    LngLat,
    SessionState,
    Token,
    UserDetails,
    Visibility,
)

__all__ = [
    "AnnotationController",
    "CharmeNodeClient",
    "MapSurface",
    "Response",
    "TokenStore",
    "Transport",
    "AuthenticationError",
    "CharmeError",
    "DatasetNotSelectedError",
    "GeometryError",
    "PreconditionError",
    "RemoteServiceError",
    "TransportError",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "Point",
    "Polygon",
    "encode",
    "shape_from_geojson",
    "SessionManager",
    "AnnotationDraft",
    "AnnotationRecord",
    "Bounds",
    "DatasetSelection",
    "LngLat",
    "SessionState",
    "Token",
    "UserDetails",
    "Visibility",
]
