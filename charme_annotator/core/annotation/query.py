"""
SPARQL queries for stored annotations.

Two forms are built: a viewport query (annotations intersecting the visible
map rectangle) and a dataset query (annotations bound to one dataset URI and
variable). Both walk annotation -> body/target -> selector -> spatial
extent -> geometry -> WKT.

Identifiers are embedded verbatim inside the FILTER literals. A quote or
control character in a dataset URI or variable name changes the query; that
is a known injection risk and is left to the caller.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .errors import DatasetNotSelectedError
from .state import Bounds, DatasetSelection
from .utils import format_coordinate

DEFAULT_LIMIT = 100

PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("charme", "http://purl.org/voc/charme#"),
    ("oa", "http://www.w3.org/ns/oa#"),
    ("geo", "http://www.opengis.net/ont/geosparql#"),
    ("geof", "http://www.opengis.net/def/function/geosparql/"),
    ("cnt", "http://www.w3.org/2011/content#"),
    ("foaf", "http://xmlns.com/foaf/0.1/"),
)

# annotation -> target -> selector -> spatial extent -> geometry -> WKT
SPATIAL_PATH = (
    ("?anno", "oa:hasTarget", "?target"),
    ("?target", "oa:hasSelector", "?selector"),
    ("?selector", "charme:hasSpatialExtent", "?sp"),
    ("?sp", "geo:hasGeometry", "?geometry"),
    ("?geometry", "geo:asWKT", "?wkt"),
)


@dataclass
class SparqlQuery:
    """A SELECT query assembled from triple patterns and filters."""

    variables: Sequence[str]
    patterns: List[Tuple[str, str, str]] = field(default_factory=list)
    filters: List[str] = field(default_factory=list)
    limit: Optional[int] = None
    prefixes: Sequence[Tuple[str, str]] = PREFIXES

    def serialize(self) -> str:
        lines = [f"PREFIX {name}: <{uri}>" for name, uri in self.prefixes]
        lines.append("SELECT " + " ".join(f"?{v}" for v in self.variables))
        lines.append("WHERE {")
        lines.extend(f"    {s} {p} {o} ." for s, p, o in self.patterns)
        lines.extend(f"    FILTER({f}) ." for f in self.filters)
        lines.append("}")
        if self.limit is not None:
            lines.append(f"LIMIT {self.limit}")
        return "\n".join(lines)

    def __str__(self):
        return self.serialize()


def bounds_polygon(bounds: Bounds) -> str:
    """WKT rectangle for the viewport, corners in SW, NW, NE, SE, SW order."""
    min_x = format_coordinate(bounds.min_x)
    min_y = format_coordinate(bounds.min_y)
    max_x = format_coordinate(bounds.max_x)
    max_y = format_coordinate(bounds.max_y)
    corners = [
        (min_x, min_y),
        (min_x, max_y),
        (max_x, max_y),
        (max_x, min_y),
        (min_x, min_y),
    ]
    return "POLYGON((" + ",".join(f"{x} {y}" for x, y in corners) + "))"


def viewport_query(bounds: Bounds, limit: int = DEFAULT_LIMIT) -> SparqlQuery:
    """Query annotations whose extent intersects ``bounds``."""
    patterns = [
        ("?anno", "oa:hasBody", "?body"),
        ("?anno", "oa:annotatedBy", "?authorUri"),
        ("?authorUri", "foaf:name", "?name"),
        ("?body", "cnt:chars", "?text"),
    ]
    patterns.extend(SPATIAL_PATH)
    return SparqlQuery(
        variables=("text", "name", "wkt"),
        patterns=patterns,
        filters=[
            f'geof:sfIntersects(?wkt, "{bounds_polygon(bounds)}"^^geo:wktLiteral)'
        ],
        limit=limit,
    )


def dataset_query(dataset_uri: str, variable_name: str) -> SparqlQuery:
    """Query every annotation on one dataset variable, matched exactly."""
    patterns = [
        ("?anno", "oa:hasBody", "?body"),
        ("?anno", "oa:annotatedBy", "?authorUri"),
        ("?anno", "oa:annotatedAt", "?time"),
        ("?authorUri", "foaf:givenName", "?firstname"),
        ("?authorUri", "foaf:familyName", "?surname"),
        ("?authorUri", "foaf:accountName", "?account"),
        ("?body", "cnt:chars", "?text"),
    ]
    patterns.extend(SPATIAL_PATH)
    patterns.extend(
        [
            ("?target", "oa:hasSource", "?datasetUri"),
            ("?datasetUri", "a", "charme:dataset"),
            ("?selector", "charme:hasVariable", "?variableUri"),
            ("?variableUri", "charme:hasInternalName", "?variableName"),
            ("?authorUri", "foaf:mbox", "?email"),
        ]
    )
    return SparqlQuery(
        variables=("wkt", "text", "firstname", "surname", "email", "time", "account"),
        patterns=patterns,
        filters=[
            f'?variableName="{variable_name}"',
            f'str(?datasetUri)="{dataset_uri}"',
        ],
    )


def build_viewport_query(bounds: Bounds, limit: int = DEFAULT_LIMIT) -> str:
    return viewport_query(bounds, limit).serialize()


def build_dataset_query(dataset_uri: str, variable_name: str) -> str:
    return dataset_query(dataset_uri, variable_name).serialize()


def build_query_for(
    mode: str,
    selection: Optional[DatasetSelection],
    bounds: Optional[Bounds] = None,
    limit: int = DEFAULT_LIMIT,
) -> str:
    """
    Build the query the controller issues on toggle-on.

    Args:
        mode: "dataset" or "viewport"
        selection: Current dataset selection, required in both modes
        bounds: Viewport, required in viewport mode
        limit: Viewport result cap

    Raises:
        DatasetNotSelectedError: If no dataset has been selected
        ValueError: On an unknown mode or missing bounds
    """
    if selection is None:
        raise DatasetNotSelectedError()
    if mode == "dataset":
        return build_dataset_query(selection.dataset_uri, selection.variable_name)
    if mode == "viewport":
        if bounds is None:
            raise ValueError("Viewport query needs map bounds")
        return build_viewport_query(bounds, limit)
    raise ValueError(f"Unknown query mode: {mode}")
