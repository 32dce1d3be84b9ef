"""
Interfaces module - adapters for the annotation core's collaborators.

``http`` and ``token_store`` carry no UI dependency; ``leaflet_adapter``
needs the ``leaflet`` extra (ipyleaflet, ipywidgets) and is imported
explicitly.
"""

from .http import RequestsTransport
from .token_store import FileTokenStore, MemoryTokenStore

__all__ = ["RequestsTransport", "FileTokenStore", "MemoryTokenStore"]
