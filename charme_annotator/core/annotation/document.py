"""
Turtle documents for annotation submission.

The node ingests a fixed-schema Turtle graph: an ``oa:Annotation`` linking a
``charme:DatasetSubset`` target (dataset + variable/spatial selector) to a
plain-text body. Documents are assembled from small statement records and
serialized in one place.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .state import AnnotationDraft, UserDetails
from .utils import format_timestamp

# Local (anonymous) resources are named in this namespace; the node
# replaces them with its own identifiers on insert.
LOCAL_NAMESPACE = "http://localhost/"

PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("chnode", LOCAL_NAMESPACE),
    ("charme", "http://purl.org/voc/charme#"),
    ("oa", "http://www.w3.org/ns/oa#"),
    ("foaf", "http://xmlns.com/foaf/0.1/"),
    ("prov", "http://www.w3.org/ns/prov#"),
    ("xsd", "http://www.w3.org/2001/XML-Schema#"),
    ("geo", "http://www.opengis.net/ont/geosparql#"),
    ("cnt", "http://www.w3.org/2011/content#"),
    ("dc", "http://purl.org/dc/elements/1.1/"),
    ("dctypes", "http://purl.org/dc/dcmitype/"),
)

ANNOTATION_ID = "<chnode:annoID>"
TARGET_ID = "<chnode:targetID>"
BODY_ID = "<chnode:bodyID>"
SELECTOR_ID = "<chnode:subsetSelectorID>"
VARIABLE_ID = "<chnode:variableID-01>"
SPATIAL_EXTENT_ID = "<chnode:spatialExtentID-01>"
GEOMETRY_ID = "<chnode:geometryID-01>"
AGENT_ID = "<chnode:agentID>"


def iri(value: str) -> str:
    """Wrap a URI in angle brackets, verbatim."""
    return f"<{value}>"


def literal(value: str, datatype: Optional[str] = None) -> str:
    """
    Quote a literal, verbatim.

    Free text is not escaped here; callers embedding user input are
    responsible for it.
    """
    text = f'"{value}"'
    if datatype:
        text += f"^^{datatype}"
    return text


@dataclass
class TurtleStatement:
    """All triples sharing one subject."""

    subject: str
    types: Sequence[str] = ()
    predicates: List[Tuple[str, str]] = field(default_factory=list)

    def add(self, predicate: str, obj: str) -> "TurtleStatement":
        self.predicates.append((predicate, obj))
        return self

    def objects(self, predicate: str) -> List[str]:
        return [o for p, o in self.predicates if p == predicate]

    def serialize(self) -> str:
        clauses = []
        if self.types:
            clauses.append("a " + ", ".join(self.types))
        clauses.extend(f"{p} {o}" for p, o in self.predicates)
        return self.subject + " " + " ;\n    ".join(clauses) + " ."


@dataclass
class TurtleDocument:
    """An ordered set of prefixes and statements."""

    prefixes: Sequence[Tuple[str, str]] = PREFIXES
    statements: List[TurtleStatement] = field(default_factory=list)

    def statement(self, subject: str) -> Optional[TurtleStatement]:
        for statement in self.statements:
            if statement.subject == subject:
                return statement
        return None

    def serialize(self) -> str:
        lines = [f"@prefix {name}: <{uri}> ." for name, uri in self.prefixes]
        lines.extend(s.serialize() for s in self.statements)
        return "\n".join(lines) + "\n"

    def __str__(self):
        return self.serialize()


def _author_statement(author: UserDetails) -> Optional[TurtleStatement]:
    statement = TurtleStatement(
        iri(author.uri) if author.uri else AGENT_ID, types=("foaf:Person",)
    )
    if author.first_name:
        statement.add("foaf:givenName", literal(author.first_name))
    if author.last_name:
        statement.add("foaf:familyName", literal(author.last_name))
    if author.full_name:
        statement.add("foaf:name", literal(author.full_name))
    if author.username:
        statement.add("foaf:accountName", literal(author.username))
    if author.email:
        statement.add("foaf:mbox", iri(f"mailto:{author.email}"))
    if not statement.predicates:
        return None
    return statement


def build_document(draft: AnnotationDraft) -> TurtleDocument:
    """
    Build the submission document for a draft.

    Author triples are only written for the fields that are known; with no
    author at all the annotation carries no ``oa:annotatedBy``.

    Args:
        draft: Annotation to serialize

    Returns:
        TurtleDocument ready to be serialized and posted
    """
    annotation = TurtleStatement(ANNOTATION_ID, types=("oa:Annotation",))
    annotation.add("oa:annotatedAt", literal(format_timestamp(draft.timestamp)))

    author = _author_statement(draft.author) if draft.author else None
    if author is not None:
        annotation.add("oa:annotatedBy", author.subject)

    annotation.add("oa:hasTarget", TARGET_ID)
    annotation.add("oa:hasBody", BODY_ID)
    annotation.add("oa:motivatedBy", "oa:linking")

    statements = [annotation]
    if author is not None:
        statements.append(author)

    statements.extend(
        [
            TurtleStatement(TARGET_ID, types=("charme:DatasetSubset",))
            .add("oa:hasSource", iri(draft.dataset_uri))
            .add("oa:hasSelector", SELECTOR_ID),
            TurtleStatement(iri(draft.dataset_uri), types=("charme:dataset",)),
            TurtleStatement(SELECTOR_ID, types=("charme:SubsetSelector",))
            .add("charme:hasVariable", VARIABLE_ID)
            .add("charme:hasSpatialExtent", SPATIAL_EXTENT_ID),
            TurtleStatement(BODY_ID, types=("cnt:ContentAsText", "dctypes:Text"))
            .add("cnt:chars", literal(draft.comment))
            .add("dc:format", literal("text/plain")),
            TurtleStatement(VARIABLE_ID, types=("charme:Variable",))
            .add("charme:hasInternalName", literal(draft.variable_name)),
            TurtleStatement(SPATIAL_EXTENT_ID, types=("charme:SpatialExtent",))
            .add("geo:hasGeometry", GEOMETRY_ID),
            TurtleStatement(GEOMETRY_ID, types=("geo:Geometry",))
            .add("geo:asWKT", literal(draft.location, "geo:wktLiteral")),
        ]
    )
    return TurtleDocument(statements=statements)


def build(
    dataset_uri: str,
    variable_name: str,
    spatial_text: str,
    comment: str,
    author: Optional[UserDetails] = None,
) -> str:
    """Serialize an annotation straight from its parts."""
    draft = AnnotationDraft(
        dataset_uri=dataset_uri,
        variable_name=variable_name,
        location=spatial_text,
        comment=comment,
        author=author,
    )
    return build_document(draft).serialize()
