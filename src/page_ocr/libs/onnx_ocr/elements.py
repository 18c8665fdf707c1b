"""Result types shared by the OCR stages."""

from dataclasses import dataclass, field
from enum import Enum


class TextOrientation(Enum):
    """Text rotation, counter-clockwise."""
    HORIZONTAL = 0
    ROTATED_90 = 90
    ROTATED_180 = 180
    ROTATED_270 = 270

    @property
    def angle(self) -> int:
        return self.value


@dataclass
class Rectangle:
    """Axis-aligned box in page points, y axis pointing up."""
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y

    @property
    def top(self) -> float:
        return self.y + self.height


@dataclass
class TextRecord:
    """Recognized text of one detected region."""
    text: str
    bbox: Rectangle
    orientation: TextOrientation = field(default=TextOrientation.HORIZONTAL)
