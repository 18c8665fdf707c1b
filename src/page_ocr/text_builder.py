"""
Plain text assembly from OCR text records

Records are grouped into lines and words using their page rectangles. All
distances are measured in the reading frame of the record orientation:
"parallel" runs along the text direction, "perpendicular" across it.
"""

from functools import cmp_to_key
from typing import Dict, List

from .libs.onnx_ocr.elements import Rectangle, TextOrientation, TextRecord

INTERSECTION_THRESHOLD = 0.7
GAP_THRESHOLD = 0.1


def _parallel_start(record: TextRecord) -> float:
    bbox = record.bbox
    if record.orientation == TextOrientation.ROTATED_90:
        return bbox.bottom
    if record.orientation == TextOrientation.ROTATED_180:
        return -bbox.right
    if record.orientation == TextOrientation.ROTATED_270:
        return -bbox.top
    return bbox.left


def _parallel_end(record: TextRecord) -> float:
    bbox = record.bbox
    if record.orientation == TextOrientation.ROTATED_90:
        return bbox.top
    if record.orientation == TextOrientation.ROTATED_180:
        return -bbox.left
    if record.orientation == TextOrientation.ROTATED_270:
        return -bbox.bottom
    return bbox.right


def _perpendicular_bottom(record: TextRecord) -> float:
    bbox = record.bbox
    if record.orientation == TextOrientation.ROTATED_90:
        return -bbox.right
    if record.orientation == TextOrientation.ROTATED_180:
        return -bbox.top
    if record.orientation == TextOrientation.ROTATED_270:
        return bbox.left
    return bbox.bottom


def _perpendicular_top(record: TextRecord) -> float:
    bbox = record.bbox
    if record.orientation == TextOrientation.ROTATED_90:
        return -bbox.left
    if record.orientation == TextOrientation.ROTATED_180:
        return -bbox.bottom
    if record.orientation == TextOrientation.ROTATED_270:
        return bbox.right
    return bbox.top


def _is_vertical(record: TextRecord) -> bool:
    return record.orientation in (TextOrientation.ROTATED_90, TextOrientation.ROTATED_270)


def _width(record: TextRecord) -> float:
    return record.bbox.height if _is_vertical(record) else record.bbox.width


def _height(record: TextRecord) -> float:
    return record.bbox.width if _is_vertical(record) else record.bbox.height


def _intersect(first: TextRecord, second: TextRecord) -> bool:
    intersection = (
        min(_perpendicular_top(first), _perpendicular_top(second))
        - max(_perpendicular_bottom(first), _perpendicular_bottom(second))
    )
    ratios = [intersection / height for height in (_height(first), _height(second)) if height > 0]
    return bool(ratios) and max(ratios) > INTERSECTION_THRESHOLD


def _compare(first: TextRecord, second: TextRecord) -> int:
    if first is second:
        return 0
    result = first.orientation.angle - second.orientation.angle
    if result != 0:
        return 1 if result > 0 else -1
    if not _intersect(first, second):
        # Higher lines come first
        middle_diff = (
            _perpendicular_bottom(second) + _height(second) / 2
            - (_perpendicular_bottom(first) + _height(first) / 2)
        )
        return 1 if middle_diff > 0 else -1
    return 1 if _parallel_start(first) > _parallel_start(second) else -1


def is_in_same_line(current: TextRecord, previous: TextRecord) -> bool:
    """Whether two records share orientation and overlap across the text direction."""
    if current.orientation != previous.orientation:
        return False
    return _intersect(current, previous)


def is_at_word_boundary(current: TextRecord, previous: TextRecord) -> bool:
    """Whether the gap between two records on a line separates words.

    A gap counts when it exceeds 10% of the smaller average character width.
    Overlapping records never form a boundary.
    """
    dist = _parallel_start(current) - _parallel_end(previous)
    if dist < 0:
        dist = _parallel_start(previous) - _parallel_end(current)
        if dist < 0:
            return False
    return dist > GAP_THRESHOLD * min(_char_width(current), _char_width(previous))


def _char_width(record: TextRecord) -> float:
    if not record.text:
        return float("inf")
    return _width(record) / len(record.text)


def sort_records_by_lines(pages: Dict[int, List[TextRecord]]):
    """Sort the records of every page in reading order, in place."""
    for records in pages.values():
        records.sort(key=cmp_to_key(_compare))


def build_text(pages: Dict[int, List[TextRecord]]) -> str:
    """
    Join page records into plain text

    Args:
        pages: Mapping of page number to records; sorted in place

    Returns:
        Text with one line per text line and a newline after every page
    """
    sort_records_by_lines(pages)
    output = []
    for page in sorted(pages):
        parts = []
        last_chunk = None
        for chunk in pages[page]:
            if last_chunk is None:
                parts.append(chunk.text)
            elif is_in_same_line(chunk, last_chunk):
                # Only one space, even if the chunks carry their own
                if (
                    is_at_word_boundary(chunk, last_chunk)
                    and not chunk.text.startswith(" ")
                    and not last_chunk.text.endswith(" ")
                ):
                    parts.append(" ")
                parts.append(chunk.text)
            else:
                parts.append("\n")
                parts.append(chunk.text)
            last_chunk = chunk
        output.append("".join(parts))
        output.append("\n")
    return "".join(output)


def generify_word_bboxes_by_line(pages: Dict[int, List[TextRecord]]):
    """Give all words of a line the same extent across the text direction, in place."""
    sort_records_by_lines(pages)
    for page in sorted(pages):
        line = []
        last_chunk = None
        for chunk in pages[page]:
            if last_chunk is not None and not is_in_same_line(chunk, last_chunk):
                _update_bboxes(line)
                line = []
            line.append(chunk)
            last_chunk = chunk
        _update_bboxes(line)


def _update_bboxes(line: List[TextRecord]):
    if not line:
        return
    if _is_vertical(line[0]):
        line_left = min(word.bbox.left for word in line)
        line_width = max(word.bbox.width for word in line)
        for word in line:
            word.bbox = Rectangle(line_left, word.bbox.y, line_width, word.bbox.height)
    else:
        line_top = max(word.bbox.top for word in line)
        line_height = max(word.bbox.height for word in line)
        line_bottom = min(word.bbox.bottom for word in line)
        delta = (line_top - line_bottom - line_height) / 2
        for word in line:
            word.bbox = Rectangle(word.bbox.x, line_bottom + delta, word.bbox.width, line_height)
