"""
State for the annotation core.

Contains the data classes exchanged between the session manager, the
controller and the builders.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class SessionState(Enum):
    """Authentication lifecycle of a SessionManager."""

    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    LOGGED_IN = "logged_in"


class Visibility(Enum):
    """Whether stored annotations are rendered on the map."""

    OFF = "off"
    ON = "on"


@dataclass(frozen=True)
class LngLat:
    """A longitude/latitude pair in degrees."""

    lng: float
    lat: float


@dataclass(frozen=True)
class Bounds:
    """Map viewport rectangle given by its south-west and north-east corners."""

    south_west: LngLat
    north_east: LngLat

    @property
    def min_x(self) -> float:
        return self.south_west.lng

    @property
    def min_y(self) -> float:
        return self.south_west.lat

    @property
    def max_x(self) -> float:
        return self.north_east.lng

    @property
    def max_y(self) -> float:
        return self.north_east.lat

    @classmethod
    def from_corners(cls, south, west, north, east):
        """Create from ((south, west), (north, east)) style values."""
        return cls(LngLat(lng=west, lat=south), LngLat(lng=east, lat=north))


@dataclass
class Token:
    """An OAuth access token as cached by the token store."""

    access_token: str
    expires_at: Optional[float] = None
    scope: Optional[str] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        if now is None:
            now = time.time()
        return now >= self.expires_at

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "access_token": self.access_token,
            "expires_at": self.expires_at,
            "scope": self.scope,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            access_token=data["access_token"],
            expires_at=data.get("expires_at"),
            scope=data.get("scope"),
        )


@dataclass
class UserDetails:
    """Identity returned by the node's user-info endpoint."""

    username: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    uri: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @classmethod
    def from_dict(cls, data: dict):
        """Create from the user-info JSON payload."""
        known = {"username", "first_name", "last_name", "email", "uri"}
        return cls(
            username=data.get("username", ""),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            email=data.get("email") or "",
            uri=data.get("uri"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class DatasetSelection:
    """The dataset and variable annotations are attached to."""

    dataset_uri: str
    variable_name: str


@dataclass
class AnnotationDraft:
    """
    Everything needed to serialize one annotation.

    Built once per submission and consumed immediately.
    """

    dataset_uri: str
    variable_name: str
    location: str
    comment: str
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    author: Optional[UserDetails] = None


@dataclass
class AnnotationRecord:
    """One row of a query result, read from a GeoJSON feature."""

    spatial_text: Optional[str]
    text: Optional[str] = None
    name: Optional[str] = None
    firstname: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    time: Optional[str] = None
    account: Optional[str] = None
    geometry: Optional[Dict[str, Any]] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_feature(cls, feature: dict):
        """
        Create from a GeoJSON feature.

        The WKT comes from the ``wkt`` property when the service sends it,
        otherwise it is derived from the feature geometry.
        """
        from shapely.geometry import shape

        properties = feature.get("properties") or {}
        geometry = feature.get("geometry")
        spatial_text = properties.get("wkt")
        if spatial_text is None and geometry:
            spatial_text = shape(geometry).wkt
        return cls(
            spatial_text=spatial_text,
            text=properties.get("text"),
            name=properties.get("name"),
            firstname=properties.get("firstname"),
            surname=properties.get("surname"),
            email=properties.get("email"),
            time=properties.get("time"),
            account=properties.get("account"),
            geometry=geometry,
            properties=dict(properties),
        )
