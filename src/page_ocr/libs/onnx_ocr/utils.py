"""Utility functions for OCR pipeline."""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import cv2
import numpy as np
from rapidfuzz.distance import Levenshtein

from .elements import Rectangle
from .preprocess import round_half_up

# Page points per image pixel (72 / 96 DPI)
PX_TO_PT = 0.75

SPLIT_CROPS_MAX_RATIO = 8.0
SPLIT_CROPS_TARGET_RATIO = 6.0
SPLIT_CROPS_DILATION_FACTOR = 1.4


def extract_crops(img: np.ndarray, boxes: Iterable[np.ndarray]) -> List[np.ndarray]:
    """Crop and straighten text regions from an image.

    Args:
        img: Source image (H, W, C)
        boxes: (4, 2) arrays in pixels, ordered BL, TL, TR, BR

    Returns:
        One upright crop per box
    """
    crops = []
    for box in boxes:
        points = np.asarray(box, dtype=np.float32)
        box_width = float(np.linalg.norm(points[1] - points[2]))
        box_height = float(np.linalg.norm(points[1] - points[0]))

        src_pts = points[:3]
        dst_pts = np.float32([
            [0, box_height - 1],
            [0, 0],
            [box_width - 1, 0],
        ])
        M = cv2.getAffineTransform(src_pts, dst_pts)
        crops.append(cv2.warpAffine(
            img,
            M,
            (max(1, int(box_width)), max(1, int(box_height))),
        ))
    return crops


@dataclass
class SplitResult:
    """Sub-images ready for recognition and how many belong to each crop."""
    images: List[np.ndarray] = field(default_factory=list)
    counts: List[int] = field(default_factory=list)


def split_text_images(images: Sequence[np.ndarray]) -> SplitResult:
    """Split very wide crops into overlapping segments.

    Crops with an aspect ratio of at least 8 are cut into
    ``ceil(ratio / 6)`` segments, each widened by a factor 1.4 so that
    neighbours overlap.
    """
    result = SplitResult()
    for image in images:
        height, width = image.shape[:2]
        aspect_ratio = width / height
        if aspect_ratio < SPLIT_CROPS_MAX_RATIO:
            result.images.append(image)
            result.counts.append(1)
            continue

        split_count = int(math.ceil(aspect_ratio / SPLIT_CROPS_TARGET_RATIO))
        raw_split_width = width / split_count
        half_width = (SPLIT_CROPS_DILATION_FACTOR * raw_split_width) / 2

        non_empty = 0
        for j in range(split_count):
            center = (j + 0.5) * raw_split_width
            min_x = max(0, int(math.floor(center - half_width)))
            max_x = min(width - 1, int(math.ceil(center + half_width)))
            if max_x - min_x == 0:
                continue
            non_empty += 1
            result.images.append(image[:, min_x:max_x])
        result.counts.append(non_empty)
    return result


def merge_strings(accumulator: str, fragment: str) -> str:
    """Stitch the text of the next overlapping segment onto the text so far.

    Args:
        accumulator: Text merged from the previous segments
        fragment: Text of the next segment

    Returns:
        Merged text
    """
    common_length = min(len(accumulator), len(fragment))
    scores = [
        Levenshtein.distance(accumulator[len(accumulator) - i - 1:], fragment[:i + 1]) / (i + 1.0)
        for i in range(common_length)
    ]

    if common_length > 1 and scores[0] == 0 and scores[1] == 0:
        # Split landed inside a run of repeated characters: use the
        # geometric overlap, bounded by the leading zero scores
        overlap = round_half_up(
            len(fragment) * (SPLIT_CROPS_DILATION_FACTOR - 1) / SPLIT_CROPS_DILATION_FACTOR
        )
        zeros = 0
        for score in scores:
            if score != 0:
                break
            zeros += 1
        index = min(zeros, overlap)
    else:
        min_score = 1.0
        index = 0
        for i, score in enumerate(scores):
            if score < min_score:
                min_score = score
                index = i + 1

    if index == 0:
        return accumulator + fragment
    return accumulator[:-1] + fragment[index - 1:]


def merge_split_results(texts: Iterable[str], counts: Sequence[int]) -> List[str]:
    """Merge recognized segments back into one string per original crop.

    Args:
        texts: Recognized text of every segment, in split order
        counts: Segment count of each original crop

    Returns:
        One string per original crop
    """
    texts = iter(texts)
    merged = []
    for count in counts:
        if count == 1:
            merged.append(next(texts, ""))
            continue
        text = ""
        for fragment in _take(texts, count):
            text = merge_strings(text, fragment)
        merged.append(text)
    return merged


def _take(iterator, count: int):
    for _ in range(count):
        try:
            yield next(iterator)
        except StopIteration:
            return


def to_page_rectangle(box: np.ndarray, image_height: int) -> Rectangle:
    """Bounding rectangle of a pixel box in page points (y axis up)."""
    points = np.asarray(box, dtype=np.float64)
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)
    return Rectangle(
        x=float(PX_TO_PT * min_x),
        y=float(PX_TO_PT * (image_height - max_y)),
        width=float(PX_TO_PT * (max_x - min_x)),
        height=float(PX_TO_PT * (max_y - min_y)),
    )
