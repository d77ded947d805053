"""Rendering components for the glasses text wall."""

from .paginator import Page, render_document, paginate, paginate_lines

__all__ = [
    "Page",
    "render_document",
    "paginate",
    "paginate_lines",
]
