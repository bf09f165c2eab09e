"""Views: NiceGUI components driven by refresh coordinators."""

from refreshable.gui.views.refreshable_view import ContentBuilder, RefreshableView

__all__ = [
    "ContentBuilder",
    "RefreshableView",
]
