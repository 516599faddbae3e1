from __future__ import annotations

from typing import Optional


class PaintBarError(Exception):
    """Base class for drawing engine failures."""


class NotInitialized(PaintBarError):
    """A layer was read before the layer stack was set up."""


class UnknownTool(PaintBarError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown tool: {self.name!r}"


class InvalidDimensions(PaintBarError, ValueError):
    def __init__(self, width: object, height: object, reason: Optional[str] = None) -> None:
        message = f"invalid canvas size {width}x{height}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.width = width
        self.height = height


class ImageLoadFailure(PaintBarError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"failed to load image from {source}: {reason}")
        self.source = source
        self.reason = reason


class InvalidColor(PaintBarError, ValueError):
    pass
