"""Live preview driving."""

from brandr.core.preview.controller import PreviewController, PreviewStatus

__all__ = [
    "PreviewController",
    "PreviewStatus",
]
