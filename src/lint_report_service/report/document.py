"""Buffered, paginated document built from simple draw primitives.

Content is laid out top-down in page coordinates (origin at the top-left
corner, y grows downwards). Blocks are measured before they are placed, so a
block is always drawn on a single page. All pages stay in memory until
:meth:`Document.finalize` has stamped them with the final page count.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, List, Union


class RenderError(RuntimeError):
    """Raised when the report cannot be laid out or drawn."""


@dataclass(slots=True, frozen=True)
class PageGeometry:
    width: float = 595.0
    height: float = 842.0
    margin_top: float = 60.0
    margin_bottom: float = 72.0
    margin_left: float = 50.0
    margin_right: float = 50.0

    @property
    def content_top(self) -> float:
        return self.margin_top

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin_bottom

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        return self.content_bottom - self.content_top


@dataclass(slots=True, frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    radius: float = 0.0

    def shifted(self, dy: float) -> "Rect":
        return replace(self, y=self.y + dy)


@dataclass(slots=True, frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    fill: str

    def shifted(self, dy: float) -> "Circle":
        return replace(self, cy=self.cy + dy)


@dataclass(slots=True, frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 1.0

    def shifted(self, dy: float) -> "Line":
        return replace(self, y1=self.y1 + dy, y2=self.y2 + dy)


@dataclass(slots=True, frozen=True)
class TextRun:
    """A single line of text; ``y`` is the top of the line box."""

    x: float
    y: float
    text: str
    font: str
    size: float
    color: str
    width: float | None = None
    align: str = "left"

    def shifted(self, dy: float) -> "TextRun":
        return replace(self, y=self.y + dy)


Primitive = Union[Rect, Circle, Line, TextRun]


@dataclass(slots=True)
class Block:
    """Primitives in block-local coordinates plus the height they occupy."""

    label: str
    height: float = 0.0
    primitives: List[Primitive] = field(default_factory=list)

    def add(self, primitive: Primitive) -> Primitive:
        self.primitives.append(primitive)
        return primitive

    def texts(self) -> List[str]:
        return [item.text for item in self.primitives if isinstance(item, TextRun)]


@dataclass(slots=True, frozen=True)
class PlacedBlock:
    label: str
    top: float
    bottom: float
    first_primitive: int
    primitive_count: int


@dataclass(slots=True)
class Page:
    index: int
    cursor: float
    primitives: List[Primitive] = field(default_factory=list)
    blocks: List[PlacedBlock] = field(default_factory=list)
    footer: List[Primitive] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def decorate(self, primitive: Primitive) -> None:
        """Draw at absolute page coordinates, outside of block flow."""

        self.primitives.append(primitive)

    def stamp(self, primitive: Primitive) -> None:
        self.footer.append(primitive)

    def texts(self) -> List[str]:
        return [
            item.text for item in (*self.primitives, *self.footer) if isinstance(item, TextRun)
        ]


class Document:
    """Append-only page buffer with a random-access finalization pass."""

    def __init__(self, geometry: PageGeometry | None = None) -> None:
        self.geometry = geometry or PageGeometry()
        self._pages: List[Page] = []
        self._finalized = False

    @property
    def pages(self) -> List[Page]:
        return list(self._pages)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def current_page(self) -> Page:
        if not self._pages:
            return self.start_page()
        return self._pages[-1]

    def start_page(self) -> Page:
        self._ensure_open()
        page = Page(index=len(self._pages), cursor=self.geometry.content_top)
        self._pages.append(page)
        return page

    def skip(self, amount: float) -> None:
        """Advance the cursor; spacing never carries over to a new page."""

        page = self.current_page
        page.cursor = min(page.cursor + amount, self.geometry.content_bottom)

    def place(self, block: Block) -> Page:
        """Draw ``block`` at the cursor, moving to a fresh page when it does not fit."""

        self._ensure_open()
        if block.height > self.geometry.usable_height:
            raise RenderError(
                f"Block '{block.label}' is {block.height:.1f}pt tall and cannot fit on a page"
            )

        page = self.current_page
        if page.cursor + block.height > self.geometry.content_bottom:
            page = self.start_page()

        top = page.cursor
        first = len(page.primitives)
        page.primitives.extend(item.shifted(top) for item in block.primitives)
        page.blocks.append(
            PlacedBlock(
                label=block.label,
                top=top,
                bottom=top + block.height,
                first_primitive=first,
                primitive_count=len(block.primitives),
            )
        )
        page.cursor = top + block.height
        return page

    def finalize(self, stamp: Callable[[int, int], None]) -> None:
        """Call ``stamp(page_index, total_pages)`` for every buffered page."""

        self._ensure_open()
        total = len(self._pages)
        for index in range(total):
            stamp(index, total)
        self._finalized = True

    def _ensure_open(self) -> None:
        if self._finalized:
            raise RenderError("Document has already been finalized")
