"""
Talking Points Paginator

Flattens a TalkingPointsBundle into display lines and slices them into
screen-sized pages for the glasses' text wall.
"""

import textwrap
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from talking_points.api.generator import TalkingPointsBundle


FOOTER_HINT = "Say 'chat' and a name or topic for new talking points."
PAGE_INDICATOR = "[Page {number}/{total}] Auto-scrolling..."


@dataclass(frozen=True)
class Page:
    """
    One screen of a rendered document.

    `lines` are the raw document lines; `text` adds the page
    indicator when the document spans more than one page.
    """
    lines: Tuple[str, ...]
    number: int = 1
    total: int = 1

    @property
    def text(self) -> str:
        body = "\n".join(self.lines)
        if self.total > 1:
            indicator = PAGE_INDICATOR.format(number=self.number, total=self.total)
            return f"{body}\n\n{indicator}"
        return body


def _wrap(text: str, max_chars: Optional[int]) -> List[str]:
    if not max_chars or len(text) <= max_chars:
        return [text]
    return textwrap.wrap(text, width=max_chars) or [text]


def _numbered(items: Sequence[str], max_chars: Optional[int]) -> List[str]:
    lines = []
    for i, item in enumerate(items, 1):
        lines.extend(_wrap(f"{i}. {item}", max_chars))
    return lines


def render_document(
    bundle: TalkingPointsBundle,
    max_chars: Optional[int] = None
) -> Tuple[str, ...]:
    """
    Render a bundle as an ordered tuple of display lines.

    Args:
        bundle: Talking points to render
        max_chars: Wrap lines longer than this (None = no wrapping)
    """
    lines: List[str] = []

    lines.extend(_wrap(f"Talking with: {bundle.query}", max_chars))
    lines.append("")
    lines.append("BACKGROUND:")
    lines.extend(_wrap(bundle.background, max_chars))
    lines.append("")
    lines.append("TOPICS TO DISCUSS:")
    lines.extend(_numbered(bundle.topics, max_chars))
    lines.append("")
    lines.append("QUESTIONS TO ASK:")
    lines.extend(_numbered(bundle.questions, max_chars))
    lines.append("")
    lines.extend(_wrap(FOOTER_HINT, max_chars))

    return tuple(lines)


def paginate_lines(lines: Sequence[str], lines_per_screen: int) -> List[Page]:
    """
    Slice document lines into consecutive pages.

    Raises:
        ValueError: lines_per_screen < 1
    """
    if lines_per_screen < 1:
        raise ValueError(f"lines_per_screen must be >= 1, got {lines_per_screen}")

    chunks = [
        tuple(lines[start:start + lines_per_screen])
        for start in range(0, len(lines), lines_per_screen)
    ] or [()]

    total = len(chunks)
    return [
        Page(lines=chunk, number=i, total=total)
        for i, chunk in enumerate(chunks, 1)
    ]


def paginate(
    bundle: TalkingPointsBundle,
    lines_per_screen: int,
    max_chars: Optional[int] = None
) -> List[Page]:
    """Render a bundle and split it into pages."""
    return paginate_lines(render_document(bundle, max_chars), lines_per_screen)
