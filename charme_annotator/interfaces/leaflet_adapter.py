"""
ipyleaflet adapter for the annotation controller.

Bridges AnnotationController with an ipyleaflet Map in a notebook: the
DrawControl feeds drawn shapes in, comment forms are ipywidgets popups and
stored annotations are GeoJSON layers.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ipyleaflet import DrawControl, GeoJSON, Map, Popup
from ipywidgets import HTML, Button, HBox, Layout, Textarea, VBox

from ..core.annotation.collaborators import MapSurface
from ..core.annotation.errors import GeometryError
from ..core.annotation.geometry import anchor_of, shape_from_geojson, to_geojson
from ..core.annotation.state import AnnotationRecord, Bounds

logger = logging.getLogger(__name__)

DRAWN_STYLE = {"color": "#3388ff", "fillOpacity": 0.2}
ANNOTATION_STYLE = {"fillOpacity": 0.5}


def make_draw_control() -> DrawControl:
    """Draw toolbar offering markers, polygons and rectangles only."""
    return DrawControl(
        position="topleft",
        marker={"shapeOptions": {"alt": "Comment on data at a point"}},
        polygon={"shapeOptions": DRAWN_STYLE},
        rectangle={"shapeOptions": DRAWN_STYLE},
        polyline={},
        circle={},
        circlemarker={},
    )


class LeafletMapSurface(MapSurface):
    """MapSurface implementation on top of an ipyleaflet Map."""

    def __init__(self, leaflet_map: Map, draw_control: Optional[DrawControl] = None):
        self.map = leaflet_map
        self.draw_control = draw_control or make_draw_control()
        self._draw_handlers = []
        self._shapes: Dict[Any, Any] = {}
        self.draw_control.on_draw(self._on_draw)

    def _on_draw(self, control, action, geo_json):
        if action != "created":
            return
        # The controller owns the drawn shape from here on
        self.draw_control.clear()
        try:
            shape = shape_from_geojson(geo_json)
        except GeometryError as e:
            logger.warning("Ignoring drawn shape: %s", e)
            return
        for handler in self._draw_handlers:
            handler(shape)

    def on_draw_created(self, handler: Callable[[Any], None]) -> None:
        self._draw_handlers.append(handler)

    def set_drawing_enabled(self, enabled: bool) -> None:
        present = self.draw_control in self.map.controls
        if enabled and not present:
            self.map.add(self.draw_control)
        elif not enabled and present:
            self.map.remove(self.draw_control)

    def get_bounds(self) -> Bounds:
        if not self.map.bounds:
            raise RuntimeError("Map has not been displayed yet, bounds unknown")
        (south, west), (north, east) = self.map.bounds
        return Bounds.from_corners(south, west, north, east)

    def shape_layer(self, shape):
        layer = GeoJSON(data=to_geojson(shape), style=DRAWN_STYLE)
        self._shapes[layer] = shape
        return layer

    def annotation_layer(self, record: AnnotationRecord, popup_html: Optional[str]):
        feature = {"type": "Feature", "geometry": record.geometry, "properties": {}}
        layer = GeoJSON(data=feature, style=ANNOTATION_STYLE)
        if popup_html:
            layer.popup = HTML(value=popup_html)
        return layer

    def add_layer(self, layer) -> None:
        self.map.add(layer)

    def remove_layer(self, layer) -> None:
        self._shapes.pop(layer, None)
        if layer in self.map.layers:
            self.map.remove(layer)

    def open_comment_form(self, layer, on_submit, on_dismiss) -> None:
        anchor = anchor_of(self._shapes[layer])
        comment = Textarea(placeholder="Comment", rows=5, layout=Layout(width="300px"))
        submit = Button(description="Submit", button_style="primary")
        cancel = Button(description="Cancel")
        popup = Popup(
            location=(anchor.lat, anchor.lng),
            child=VBox([comment, HBox([submit, cancel])]),
            close_button=False,
            auto_close=False,
            close_on_escape_key=False,
            keep_in_view=True,
        )
        answered = []

        def close():
            if popup in self.map.layers:
                self.map.remove(popup)

        def handle_submit(_button):
            if answered:
                return
            answered.append(True)
            close()
            on_submit(comment.value)

        def handle_cancel(_button):
            if answered:
                return
            answered.append(True)
            close()
            on_dismiss()

        submit.on_click(handle_submit)
        cancel.on_click(handle_cancel)
        self.map.add(popup)
