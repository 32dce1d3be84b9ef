"""
Geometry encoding.

Drawn shapes are converted once, at the map-library boundary, into the
closed ``Point | Polygon`` variant below and encoded from there as WKT.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple, Union

from .errors import GeometryError
from .state import LngLat
from .utils import format_coordinate

MIN_RING_POINTS = 3


@dataclass(frozen=True)
class Point:
    """A marker drawn on the map."""

    lng: float
    lat: float


@dataclass(frozen=True)
class Polygon:
    """
    A polygon or rectangle drawn on the map.

    ``ring`` holds the vertices in insertion order and may be open or closed.
    """

    ring: Tuple[LngLat, ...]

    @classmethod
    def from_pairs(cls, pairs: Sequence[Sequence[float]]):
        """Create from ``[(lng, lat), ...]``."""
        return cls(tuple(LngLat(lng=float(p[0]), lat=float(p[1])) for p in pairs))


Shape = Union[Point, Polygon]


def _open_ring(ring: Sequence[LngLat]) -> Tuple[LngLat, ...]:
    ring = tuple(ring)
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    return ring


def _check_ring(ring: Sequence[LngLat]):
    distinct = len(set(ring))
    if distinct < MIN_RING_POINTS:
        raise GeometryError(
            f"A polygon needs at least {MIN_RING_POINTS} distinct points, got {distinct}"
        )


def encode(shape: Shape) -> str:
    """
    Encode a drawn shape as WKT.

    Polygon vertices are written in reverse insertion order so that the
    ring comes out anti-clockwise, and the ring is closed by repeating its
    first written vertex.

    Args:
        shape: Point or Polygon

    Returns:
        WKT text, e.g. ``POINT (-3.5 55)``

    Raises:
        GeometryError: If the shape kind is unknown or the ring has fewer
            than three distinct vertices
    """
    if isinstance(shape, Point):
        return f"POINT ({format_coordinate(shape.lng)} {format_coordinate(shape.lat)})"

    if isinstance(shape, Polygon):
        ring = _open_ring(shape.ring)
        _check_ring(ring)
        reversed_ring = list(reversed(ring))
        reversed_ring.append(reversed_ring[0])
        coords = ", ".join(
            f"{format_coordinate(p.lng)} {format_coordinate(p.lat)}"
            for p in reversed_ring
        )
        return f"POLYGON (({coords}))"

    raise GeometryError(f"Cannot encode shape of type {type(shape).__name__}")


def shape_from_geojson(geometry: Dict[str, Any]) -> Shape:
    """
    Build the internal shape from a GeoJSON geometry or feature.

    Draw tools report shapes as GeoJSON; this is the single place where
    that representation is turned into a Point or Polygon.

    Raises:
        GeometryError: If the geometry is missing or not a point/polygon
    """
    from shapely.errors import ShapelyError
    from shapely.geometry import shape as shapely_shape

    if geometry and geometry.get("type") == "Feature":
        geometry = geometry.get("geometry")
    if not geometry:
        raise GeometryError("No geometry given")

    try:
        geom = shapely_shape(geometry)
    except (ShapelyError, ValueError, TypeError, AttributeError, KeyError) as e:
        raise GeometryError(f"Invalid GeoJSON geometry: {e}") from e

    if geom.geom_type == "Point":
        return Point(lng=geom.x, lat=geom.y)
    if geom.geom_type == "Polygon":
        polygon = Polygon.from_pairs(list(geom.exterior.coords))
        _check_ring(polygon.ring)
        return polygon

    raise GeometryError(f"Unsupported geometry type: {geom.geom_type}")


def to_geojson(shape: Shape) -> Dict[str, Any]:
    """GeoJSON geometry for a shape, with the polygon ring closed."""
    if isinstance(shape, Point):
        return {"type": "Point", "coordinates": [shape.lng, shape.lat]}
    if isinstance(shape, Polygon):
        ring = [[p.lng, p.lat] for p in _open_ring(shape.ring)]
        if ring:
            ring.append(list(ring[0]))
        return {"type": "Polygon", "coordinates": [ring]}
    raise GeometryError(f"Cannot convert shape of type {type(shape).__name__}")


def anchor_of(shape: Shape) -> LngLat:
    """Where a popup for the shape is opened: the point itself or the centroid."""
    if isinstance(shape, Point):
        return LngLat(lng=shape.lng, lat=shape.lat)
    from shapely.geometry import shape as shapely_shape

    centroid = shapely_shape(to_geojson(shape)).centroid
    return LngLat(lng=centroid.x, lat=centroid.y)
