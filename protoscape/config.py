"""Process-wide default options."""

from __future__ import annotations

import copy

from .layout.model import LayoutOptions

_LAYOUT_OPTIONS = LayoutOptions()


def get_layout_options() -> LayoutOptions:
    return copy.deepcopy(_LAYOUT_OPTIONS)


def set_layout_options(options: LayoutOptions) -> None:
    global _LAYOUT_OPTIONS
    _LAYOUT_OPTIONS = copy.deepcopy(options)


__all__ = ["get_layout_options", "set_layout_options"]
