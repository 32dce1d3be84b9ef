"""
Event system for the annotation workflow.

Provides a decoupled way for the session manager and the controller to
notify UI components about state changes without depending on any map
library's own event system.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Session events
    LOGIN = "login"  # user
    LOGOUT = "logout"
    USER_INFO_FAILED = "user_info_failed"  # error

    # Submission events
    ANNOTATION_SUBMITTED = "annotation_submitted"
    SUBMISSION_FAILED = "submission_failed"  # error

    # Display events
    ANNOTATIONS_SHOWN = "annotations_shown"  # count
    ANNOTATIONS_HIDDEN = "annotations_hidden"
    QUERY_FAILED = "query_failed"  # error
    DATASET_SELECTED = "dataset_selected"  # selection


@dataclass
class AnnotationEvent:
    """
    One notification from the session manager or the controller.

    ``data`` carries the payload named in EventType's comments, e.g.
    ``{"user": UserDetails}`` for LOGIN or ``{"error": CharmeError}`` for
    the failure events.
    """

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Listener registry owned by a SessionManager or an AnnotationController.

    The session emits LOGIN, LOGOUT and USER_INFO_FAILED; the controller
    emits the submission, display and dataset events. Listeners run
    synchronously in registration order, at the point the state change
    completes.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        self._listeners.setdefault(event_type, []).append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Remove a listener. Unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: AnnotationEvent):
        # Listeners added or removed during emission take effect next time
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Error in %s event listener", event.event_type.value
                )

    def clear(self):
        """Drop every listener, e.g. when the map is torn down."""
        self._listeners.clear()
