"""
Tests for the ipyleaflet map surface.
"""

import pytest

ipyleaflet = pytest.importorskip("ipyleaflet")

from charme_annotator.core.annotation import AnnotationRecord, Point, Polygon  # noqa: E402
from charme_annotator.interfaces.leaflet_adapter import (  # noqa: E402
    ANNOTATION_STYLE,
    LeafletMapSurface,
)


@pytest.fixture
def leaflet_map():
    return ipyleaflet.Map(center=(50, 0), zoom=3)


@pytest.fixture
def surface(leaflet_map):
    return LeafletMapSurface(leaflet_map)


def find_buttons(popup):
    _comment, buttons = popup.child.children
    submit, cancel = buttons.children
    return submit, cancel


class TestLeafletMapSurface:
    """Test suite for LeafletMapSurface."""

    def test_drawn_shape_reaches_handler(self, surface):
        shapes = []
        surface.on_draw_created(shapes.append)

        surface._on_draw(
            surface.draw_control,
            action="created",
            geo_json={
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-3.5, 55]},
                "properties": {},
            },
        )

        assert shapes == [Point(lng=-3.5, lat=55)]

    def test_other_draw_actions_ignored(self, surface):
        shapes = []
        surface.on_draw_created(shapes.append)

        surface._on_draw(surface.draw_control, action="deleted", geo_json={})

        assert shapes == []

    def test_drawing_toggle(self, surface, leaflet_map):
        surface.set_drawing_enabled(True)
        surface.set_drawing_enabled(True)
        assert list(leaflet_map.controls).count(surface.draw_control) == 1

        surface.set_drawing_enabled(False)
        assert surface.draw_control not in leaflet_map.controls

    def test_bounds(self, surface, leaflet_map):
        with pytest.raises(RuntimeError):
            surface.get_bounds()

        leaflet_map.set_trait("bounds", ((40, -10), (60, 10)))

        bounds = surface.get_bounds()
        assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (-10, 40, 10, 60)

    def test_annotation_layer(self, surface, leaflet_map):
        record = AnnotationRecord(
            spatial_text="POINT (1 2)",
            geometry={"type": "Point", "coordinates": [1, 2]},
        )

        layer = surface.annotation_layer(record, "<b>hi</b>")
        surface.add_layer(layer)

        assert layer in leaflet_map.layers
        assert layer.style == ANNOTATION_STYLE
        assert layer.popup.value == "<b>hi</b>"

        surface.remove_layer(layer)
        assert layer not in leaflet_map.layers

    def test_comment_form_submit(self, surface, leaflet_map):
        square = Polygon.from_pairs([(0, 0), (2, 0), (2, 2), (0, 2)])
        layer = surface.shape_layer(square)
        surface.add_layer(layer)
        submitted, dismissed = [], []

        surface.open_comment_form(layer, submitted.append, lambda: dismissed.append(True))

        popup = leaflet_map.layers[-1]
        assert isinstance(popup, ipyleaflet.Popup)
        assert list(popup.location) == pytest.approx([1, 1])
        popup.child.children[0].value = "Warm"
        submit, cancel = find_buttons(popup)
        submit.click()
        cancel.click()

        assert submitted == ["Warm"]
        assert dismissed == []
        assert popup not in leaflet_map.layers

    def test_comment_form_cancel(self, surface, leaflet_map):
        layer = surface.shape_layer(Point(lng=1, lat=2))
        surface.add_layer(layer)
        submitted, dismissed = [], []

        surface.open_comment_form(layer, submitted.append, lambda: dismissed.append(True))
        popup = leaflet_map.layers[-1]
        _submit, cancel = find_buttons(popup)
        cancel.click()

        assert dismissed == [True]
        assert submitted == []
        assert list(popup.location) == [2, 1]
