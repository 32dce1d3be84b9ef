"""
Annotation controller.

Orchestrates the map, the session and the node: drawn shapes become
submitted annotations, and the visibility toggle queries the node and
renders the results.

The controller is UI-agnostic - it drives a MapSurface and emits events,
rather than manipulating widgets directly. Remote calls run as asyncio
tasks on the running loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from . import document, geometry
from .client import CharmeNodeClient
from .collaborators import MapSurface
from .errors import CharmeError, DatasetNotSelectedError
from .events import AnnotationEvent, EventEmitter, EventType
from .query import DEFAULT_LIMIT, build_query_for
from .session import SessionManager
from .state import AnnotationDraft, AnnotationRecord, DatasetSelection, Visibility
from .utils import default_annotation_formatter

logger = logging.getLogger(__name__)

QUERY_MODES = ("dataset", "viewport")

Formatter = Callable[[AnnotationRecord], str]


def _spawn(coro_fn, *args) -> asyncio.Task:
    # Raises RuntimeError before the coroutine is created when no loop runs
    loop = asyncio.get_running_loop()
    return loop.create_task(coro_fn(*args))


@dataclass(frozen=True)
class _QueryTicket:
    """Snapshot of the state a query was issued under."""

    generation: int
    selection: DatasetSelection


class AnnotationController:
    """
    Manages dataset selection, annotation visibility and submission.

    This class handles:
    - Dataset selection
    - Drawn shape -> comment form -> submission
    - Showing/hiding stored annotations
    - Discarding query responses that arrive after the state moved on
    """

    def __init__(
        self,
        map_surface: MapSurface,
        session: SessionManager,
        client: CharmeNodeClient,
        query_mode: str = "dataset",
        query_limit: int = DEFAULT_LIMIT,
    ):
        """
        Initialize annotation controller.

        Args:
            map_surface: Map the annotations are drawn on
            session: Session manager providing the token and user
            client: Node client
            query_mode: "dataset" or "viewport", the query issued on toggle-on
            query_limit: Result cap for viewport queries
        """
        if query_mode not in QUERY_MODES:
            raise ValueError(f"Unknown query mode: {query_mode}")

        self.map = map_surface
        self.session = session
        self.client = client
        self.query_mode = query_mode
        self.query_limit = query_limit

        self.selection: Optional[DatasetSelection] = None
        self.visibility = Visibility.OFF
        self.events = EventEmitter()

        self._formatter: Optional[Formatter] = None
        self._overlays: List[Any] = []
        self._generation = 0
        self._pending_query: Optional[asyncio.Task] = None

        self.map.on_draw_created(self.on_shape_drawn)
        for event_type in (EventType.LOGIN, EventType.USER_INFO_FAILED, EventType.LOGOUT):
            self.session.events.on(event_type, self._on_session_changed)
        self.map.set_drawing_enabled(self.session.is_logged_in)

    # Session wiring

    def _on_session_changed(self, event: AnnotationEvent):
        # A token is enough to draw, whether or not the user lookup worked
        self.map.set_drawing_enabled(self.session.is_logged_in)

    # Dataset selection

    def set_dataset_details(self, uri: str, variable: str):
        """Overwrite the dataset selection. Does not re-query."""
        self.selection = DatasetSelection(dataset_uri=uri, variable_name=variable)
        self._generation += 1
        self.events.emit(
            AnnotationEvent(EventType.DATASET_SELECTED, {"selection": self.selection})
        )

    def select_dataset(self, uri: str, variable: str) -> Optional[asyncio.Task]:
        """
        Select a dataset, refreshing the visible annotations if any.

        Returns:
            The query task when annotations were refreshed, else None
        """
        self.set_dataset_details(uri, variable)
        if self.is_annotations_on():
            return self.refresh()
        return None

    def _require_selection(self) -> DatasetSelection:
        if self.selection is None:
            raise DatasetNotSelectedError()
        return self.selection

    # Formatting

    def set_annotation_formatter(self, formatter: Optional[Formatter]):
        """
        Set the function used to build annotation popups.

        Args:
            formatter: Takes an AnnotationRecord, returns an HTML snippet.
                None restores the default format.
        """
        if formatter is not None and not callable(formatter):
            raise TypeError("Annotation formatter must be callable")
        self._formatter = formatter

    def format_annotation(self, record: AnnotationRecord) -> str:
        if self._formatter is not None:
            return self._formatter(record)
        return default_annotation_formatter(record)

    # Drawing and submission

    def on_shape_drawn(self, shape):
        """
        Show a drawn shape with a comment form over it.

        The temporary layer is removed once the form is submitted or
        dismissed.
        """
        layer = self.map.shape_layer(shape)
        self.map.add_layer(layer)

        def on_submit(comment: str):
            try:
                self.submit_annotation(shape, comment)
            finally:
                self.map.remove_layer(layer)

        def on_dismiss():
            logger.debug("Comment form closed without submitting")
            self.map.remove_layer(layer)

        self.map.open_comment_form(layer, on_submit, on_dismiss)

    def build_draft(self, shape, comment: str) -> AnnotationDraft:
        """
        Raises:
            DatasetNotSelectedError: If no dataset is selected
            GeometryError: If the shape cannot be encoded
        """
        selection = self._require_selection()
        return AnnotationDraft(
            dataset_uri=selection.dataset_uri,
            variable_name=selection.variable_name,
            location=geometry.encode(shape),
            comment=comment,
            author=self.session.user,
        )

    def submit_annotation(self, shape, comment: str) -> asyncio.Task:
        """
        Serialize and post an annotation.

        Preconditions are checked before anything is sent.

        Returns:
            Task resolving to True on success, False on failure

        Raises:
            DatasetNotSelectedError: If no dataset is selected
            GeometryError: If the shape cannot be encoded
            AuthenticationError: If the session has no token
        """
        draft = self.build_draft(shape, comment)
        token = self.session.require_token()
        ttl = document.build_document(draft).serialize()
        return _spawn(self._post_annotation, ttl, token)

    async def _post_annotation(self, ttl: str, token: str) -> bool:
        try:
            await self.client.insert_annotation(ttl, token)
        except CharmeError as e:
            logger.error("Problem creating annotation: %s", e)
            self.events.emit(AnnotationEvent(EventType.SUBMISSION_FAILED, {"error": e}))
            return False

        logger.info("Annotation created")
        self.events.emit(AnnotationEvent(EventType.ANNOTATION_SUBMITTED))
        if self.is_annotations_on():
            self.refresh()
        return True

    # Visibility

    def is_annotations_on(self) -> bool:
        """Checks whether annotations are currently displayed on the map."""
        return self.visibility == Visibility.ON

    def toggle_annotations(self) -> Optional[asyncio.Task]:
        """
        Toggle the stored annotations on/off.

        Switching off clears the map at once. Switching on flips the state
        immediately and returns the task that fetches and renders results.
        """
        if self.is_annotations_on():
            self._hide()
            return None
        return self._show()

    def refresh(self) -> asyncio.Task:
        """Toggle off and on again."""
        if self.is_annotations_on():
            self._hide()
        return self._show()

    def _hide(self):
        self._generation += 1
        if self._pending_query is not None and not self._pending_query.done():
            self._pending_query.cancel()
        self._pending_query = None
        self._clear_overlays()
        self.visibility = Visibility.OFF
        self.events.emit(AnnotationEvent(EventType.ANNOTATIONS_HIDDEN))

    def _show(self) -> asyncio.Task:
        selection = self._require_selection()
        bounds = self.map.get_bounds() if self.query_mode == "viewport" else None
        query_text = build_query_for(self.query_mode, selection, bounds, self.query_limit)

        self._generation += 1
        ticket = _QueryTicket(generation=self._generation, selection=selection)
        logger.debug("Fetching annotations (generation %d)", ticket.generation)
        self._pending_query = _spawn(self._fetch_and_render, query_text, ticket)
        self.visibility = Visibility.ON
        return self._pending_query

    def _is_current(self, ticket: _QueryTicket) -> bool:
        return (
            self.is_annotations_on()
            and ticket.generation == self._generation
            and ticket.selection == self.selection
        )

    async def _fetch_and_render(self, query_text: str, ticket: _QueryTicket) -> int:
        try:
            collection = await self.client.query(query_text)
        except CharmeError as e:
            if not self._is_current(ticket):
                return 0
            logger.error("Problem fetching annotations: %s", e)
            self.visibility = Visibility.OFF
            self._pending_query = None
            self.events.emit(AnnotationEvent(EventType.QUERY_FAILED, {"error": e}))
            return 0

        if not self._is_current(ticket):
            logger.debug("Discarding stale response (generation %d)", ticket.generation)
            return 0

        count = self._render(collection)
        self._pending_query = None
        self.events.emit(AnnotationEvent(EventType.ANNOTATIONS_SHOWN, {"count": count}))
        return count

    def _render(self, collection: dict) -> int:
        features = collection.get("features") or []
        for feature in features:
            if not feature.get("geometry"):
                logger.warning("Skipping annotation without geometry")
                continue
            record = AnnotationRecord.from_feature(feature)
            popup = self.format_annotation(record) if feature.get("properties") else None
            layer = self.map.annotation_layer(record, popup)
            self.map.add_layer(layer)
            self._overlays.append(layer)
        logger.debug("Rendered %d annotations", len(self._overlays))
        return len(self._overlays)

    def _clear_overlays(self):
        for layer in self._overlays:
            self.map.remove_layer(layer)
        self._overlays.clear()

    @property
    def overlays(self) -> List[Any]:
        """Layers currently rendered for stored annotations."""
        return list(self._overlays)
