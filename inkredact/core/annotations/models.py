"""
Annotation and history data types.

All coordinates are stored in document space (PDF points, origin bottom-left),
so they stay valid across zoom changes and page re-renders.
"""
import copy
import time
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

Color = Tuple[float, float, float]
Point = Tuple[float, float]


class AnnotationType(Enum):
    WHITEOUT = "whiteout"
    TEXT_STAMP = "text"
    FREEHAND = "freehand"


class ActionType(Enum):
    ADD = "add"
    DELETE = "delete"
    MOVE = "move"
    CLEAR = "clear"


def _check_color(color) -> Color:
    color = tuple(float(c) for c in color)
    if len(color) != 3 or not all(0.0 <= c <= 1.0 for c in color):
        raise ValueError(f"color must be an RGB triple in [0, 1], got {color!r}")
    return color


def _check_point(point) -> Point:
    if len(point) != 2:
        raise ValueError(f"point must have exactly two coordinates, got {point!r}")
    return (float(point[0]), float(point[1]))


def _check_page(page) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValueError(f"page must be an integer >= 1, got {page!r}")
    return page


class Annotation:
    """
    Common behaviour of every annotation kind.

    Concrete kinds are dataclasses tagged by ``annotation_type``; code that
    needs to tell them apart dispatches on that tag.
    """

    annotation_type: ClassVar[AnnotationType]
    id_prefix: ClassVar[str]

    id: Optional[str]
    page: int

    @property
    def position(self) -> Point:
        raise NotImplementedError

    def moved_to(self, x: float, y: float) -> "Annotation":
        """Return a copy of this annotation placed at (x, y)."""
        raise NotImplementedError

    def bounds(self) -> Tuple[float, float, float, float]:
        """Bounding box as (x0, y0, x1, y1) in document space."""
        raise NotImplementedError

    def copy(self) -> "Annotation":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert annotation to dictionary for JSON serialization."""
        data = asdict(self)
        data["type"] = self.annotation_type.value
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Annotation":
        """
        Create an annotation from a dictionary produced by ``to_dict``.

        Raises:
            ValueError: If the type tag is missing or unknown, or the
                payload violates the kind's invariants.
        """
        payload = dict(data)
        tag = payload.pop("type", None)
        try:
            cls = ANNOTATION_CLASSES[AnnotationType(tag)]
        except ValueError:
            raise ValueError(f"unknown annotation type {tag!r}") from None
        try:
            return cls(**payload)
        except TypeError as e:
            raise ValueError(f"bad {tag} annotation: {e}") from None


@dataclass
class Whiteout(Annotation):
    """Opaque redaction box; (x, y) is its bottom-left corner."""

    annotation_type: ClassVar[AnnotationType] = AnnotationType.WHITEOUT
    id_prefix: ClassVar[str] = "w"

    page: int
    x: float
    y: float
    width: float
    height: float
    id: Optional[str] = None

    def __post_init__(self):
        _check_page(self.page)
        # Written so that NaN sizes fail too
        if not (self.width > 0 and self.height > 0):
            raise ValueError(
                f"whiteout must have positive size, got {self.width}x{self.height}"
            )

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def moved_to(self, x: float, y: float) -> "Whiteout":
        return replace(self, x=x, y=y)

    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass
class TextStamp(Annotation):
    """Text burned onto the page; (x, y) is the baseline origin."""

    annotation_type: ClassVar[AnnotationType] = AnnotationType.TEXT_STAMP
    id_prefix: ClassVar[str] = "t"

    page: int
    x: float
    y: float
    text: str
    font_size: float = 12.0
    color: Color = (0.7, 0.7, 0.7)
    id: Optional[str] = None

    def __post_init__(self):
        _check_page(self.page)
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("text stamp needs non-empty text")
        if not self.font_size > 0:
            raise ValueError(f"font size must be positive, got {self.font_size}")
        self.color = _check_color(self.color)

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def moved_to(self, x: float, y: float) -> "TextStamp":
        return replace(self, x=x, y=y)

    def bounds(self) -> Tuple[float, float, float, float]:
        # Helvetica averages roughly half an em per glyph
        width = 0.5 * self.font_size * len(self.text)
        return (self.x, self.y, self.x + width, self.y + self.font_size)


@dataclass
class FreehandStroke(Annotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.FREEHAND
    id_prefix: ClassVar[str] = "s"

    page: int
    points: List[Point] = field(default_factory=list)
    color: Color = (0.0, 0.0, 0.0)
    width: float = 2.0
    opacity: float = 1.0
    id: Optional[str] = None

    def __post_init__(self):
        _check_page(self.page)
        self.points = [_check_point(p) for p in self.points]
        if not self.points:
            raise ValueError("freehand stroke needs at least one point")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"opacity must be within [0, 1], got {self.opacity}")
        if not self.width > 0:
            raise ValueError(f"stroke width must be positive, got {self.width}")
        self.color = _check_color(self.color)

    @property
    def position(self) -> Point:
        x0, y0, _, _ = self.bounds()
        return (x0, y0)

    def moved_to(self, x: float, y: float) -> "FreehandStroke":
        old_x, old_y = self.position
        dx, dy = x - old_x, y - old_y
        return replace(self, points=[(px + dx, py + dy) for px, py in self.points])

    def bounds(self) -> Tuple[float, float, float, float]:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["points"] = [[x, y] for x, y in self.points]
        return data


ANNOTATION_CLASSES = {
    AnnotationType.WHITEOUT: Whiteout,
    AnnotationType.TEXT_STAMP: TextStamp,
    AnnotationType.FREEHAND: FreehandStroke,
}


@dataclass
class PlacedAnnotation:
    """An annotation together with the z-index it occupied on its page."""

    page: int
    index: int
    annotation: Annotation


@dataclass
class HistoryAction:
    """A recorded, reversible description of one mutation to the store."""

    kind: ActionType
    target_id: Optional[str] = None
    before: Optional[Annotation] = None
    after: Optional[Annotation] = None
    # DELETE holds one entry, CLEAR holds every removed entry
    snapshot: List[PlacedAnnotation] = field(default_factory=list)
    # Scope of a CLEAR; None means all pages
    page: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
