"""Context Classes for the Manifest Map UI.

This module contains all context dataclasses that hold mutable UI state.
Contexts are pure data holders; controllers own the rules for changing them.

Sub-contexts:
    SelectionContext: Active marker and per-marker hover flags
    ViewContext: Theme and remount key for the hosting map widget
    ErrorPanelContext: Dismissal state of the data error panel
    ClickDeduplicationContext: Click deduplication tracking
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from manifest_map.constants import StyleConfig
from manifest_map.model.visibility import VisibilitySettings


class BaseContext(ABC):
    """Abstract base class for all context dataclasses."""

    @abstractmethod
    def clear(self) -> None:
        """Reset context to initial state."""
        ...


@dataclass
class SelectionContext(BaseContext):
    """Marker selection state.

    active_marker_id is exclusive (at most one marker). Hover flags are
    independent per marker and never imply active.
    """

    active_marker_id: str | None = None
    hovered: set[str] = field(default_factory=set)

    def is_active(self, marker_id: str) -> bool:
        return self.active_marker_id == marker_id

    def is_hovered(self, marker_id: str) -> bool:
        return marker_id in self.hovered

    def clear(self) -> None:
        self.active_marker_id = None
        self.hovered = set()


@dataclass
class ViewContext(BaseContext):
    """Hosting map widget identity inputs.

    The map widget key combines theme and map_version. Changing either
    creates a new map instance, which rebinds the drawing overlay.
    """

    theme: str = StyleConfig.DEFAULT_THEME
    map_version: int = 0

    @property
    def map_key(self) -> str:
        return f"{self.theme}-{self.map_version}"

    def bump_map_version(self) -> int:
        self.map_version += 1
        return self.map_version

    def clear(self) -> None:
        self.theme = StyleConfig.DEFAULT_THEME
        self.map_version = 0


@dataclass
class ErrorPanelContext(BaseContext):
    """Data error panel state. A new error text re-opens the panel."""

    error: str | None = None
    dismissed: bool = False

    def observe(self, error: str | None) -> None:
        if error != self.error:
            self.error = error
            self.dismissed = False

    def dismiss(self) -> None:
        self.dismissed = True

    @property
    def visible(self) -> bool:
        return self.error is not None and not self.dismissed

    def clear(self) -> None:
        self.error = None
        self.dismissed = False


@dataclass
class ClickDeduplicationContext(BaseContext):
    """Rejects the same click event being re-delivered on reruns.

    The deck component keeps returning its last event on every rerun, so a
    click is only new if its key differs from the last seen one, or if the
    same key arrives after debounce_seconds.
    """

    debounce_seconds: float = 0.0
    last_key: str | None = None
    last_time: float = 0.0

    def is_new_click(self, key: str | None) -> bool:
        if key is None:
            return False
        now = time.monotonic()
        if key == self.last_key and (self.debounce_seconds <= 0 or now - self.last_time < self.debounce_seconds):
            return False
        self.last_key = key
        self.last_time = now
        return True

    def clear(self) -> None:
        self.last_key = None
        self.last_time = 0.0


@dataclass
class ManifestMapContext:
    """Shared UI state for one manifest map.

    Sub-contexts:
        visibility: The four category toggles
        selection: Active/hover marker state
        view: Theme and remount key
        error_panel: Data error panel state
        click_dedup: Click deduplication tracking
    """

    visibility: VisibilitySettings = field(default_factory=VisibilitySettings)
    selection: SelectionContext = field(default_factory=SelectionContext)
    view: ViewContext = field(default_factory=ViewContext)
    error_panel: ErrorPanelContext = field(default_factory=ErrorPanelContext)
    click_dedup: ClickDeduplicationContext = field(default_factory=ClickDeduplicationContext)

    def __repr__(self) -> str:
        return (
            f"ManifestMapContext(active={self.selection.active_marker_id}, "
            f"hovered={sorted(self.selection.hovered)}, "
            f"map_key={self.view.map_key}, "
            f"visibility={self.visibility})"
        )
