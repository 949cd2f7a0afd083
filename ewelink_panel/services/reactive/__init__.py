"""Reactive primitives for ewelink_panel."""

from ewelink_panel.services.reactive.signal import Signal

__all__ = ["Signal"]
