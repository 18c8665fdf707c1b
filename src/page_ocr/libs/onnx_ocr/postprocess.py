"""Postprocessing modules for OCR outputs."""

from typing import List, Tuple

import cv2
import numpy as np

from .elements import TextOrientation
from .preprocess import round_half_up
from .tensor import TensorBuffer
from .vocabulary import Vocabulary


def normalize_rotated_rect(rect: Tuple) -> Tuple:
    """Bring a cv2.minAreaRect angle into [-45, 45), swapping sides if needed.

    Args:
        rect: ((cx, cy), (width, height), angle) as returned by cv2.minAreaRect

    Returns:
        Equivalent rotated rect with the normalized angle
    """
    center, (width, height), angle = rect
    clamped_angle = angle % 360.0
    if 45.0 <= clamped_angle < 135.0 or 225.0 <= clamped_angle < 315.0:
        width, height = height, width
        if clamped_angle < 135.0:
            angle = clamped_angle - 90.0
        else:
            angle = clamped_angle - 270.0
    elif 135.0 <= clamped_angle < 225.0:
        angle = clamped_angle - 180.0
    elif clamped_angle >= 315.0:
        angle = clamped_angle - 360.0
    else:
        angle = clamped_angle
    return center, (width, height), angle


class DetectionPostProcessor:
    """Post-processing for segmentation-based text detection.

    Converts a probability map to quadrilaterals in [0, 1] relative
    coordinates of the map. Points are ordered bottom-left, top-left,
    top-right, bottom-right.
    """

    UNCLIP_RATIO = 1.5

    def __init__(self, bin_thresh: float = 0.1, box_thresh: float = 0.1):
        """Initialize detection post-processor.

        Args:
            bin_thresh: Binarization threshold for probability map
            box_thresh: Minimum mean probability for a text region
        """
        self.bin_thresh = bin_thresh
        self.box_thresh = box_thresh
        self.min_size = 2
        self.opening_kernel = np.ones((3, 3), dtype=np.uint8)

    def __call__(self, prob_map: TensorBuffer) -> List[np.ndarray]:
        """Convert a probability map to text boxes.

        Args:
            prob_map: Probabilities of shape [1, H, W]

        Returns:
            List of (4, 2) float32 arrays with relative coordinates
        """
        boxes, _ = self.boxes_from_bitmap(self._as_2d(prob_map))
        return boxes

    @staticmethod
    def _as_2d(prob_map: TensorBuffer) -> np.ndarray:
        pred = prob_map.as_array()
        if pred.ndim == 3 and pred.shape[0] == 1:
            pred = pred[0]
        if pred.ndim != 2:
            raise ValueError(f"Expected [1, H, W] probability map, got shape {prob_map.shape}")
        return pred

    def binarize(self, pred: np.ndarray) -> np.ndarray:
        """Threshold the map and remove speckles with a 3x3 opening."""
        bitmap = (pred >= self.bin_thresh).astype(np.uint8)
        return cv2.morphologyEx(bitmap, cv2.MORPH_OPEN, self.opening_kernel)

    def boxes_from_bitmap(self, pred: np.ndarray) -> Tuple[List[np.ndarray], List[float]]:
        """Extract text boxes and their scores from a 2D probability map."""
        height, width = pred.shape
        bitmap = self.binarize(pred)
        contours, _ = cv2.findContours(bitmap, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        score_mask = np.zeros((height, width), dtype=np.uint8)
        boxes = []
        scores = []
        for contour in contours:
            bounding_rect = cv2.boundingRect(contour)
            _, _, box_w, box_h = bounding_rect
            if box_w < self.min_size or box_h < self.min_size:
                continue

            score = self.box_score(pred, contour, bounding_rect, score_mask)
            if score < self.box_thresh:
                continue

            box = self.unclip(contour)
            box[:, 0] = np.clip(box[:, 0] / width, 0, 1)
            box[:, 1] = np.clip(box[:, 1] / height, 0, 1)
            boxes.append(box)
            scores.append(score)

        return boxes, scores

    @staticmethod
    def box_score(
        pred: np.ndarray,
        contour: np.ndarray,
        bounding_rect: Tuple[int, int, int, int],
        score_mask: np.ndarray,
    ) -> float:
        """Mean of the positive probabilities inside the filled contour.

        ``score_mask`` is scratch space; it is left zeroed on return.
        """
        height, width = pred.shape
        x, y, box_w, box_h = bounding_rect
        x_begin, x_end = max(0, x), min(width, x + box_w)
        y_begin, y_end = max(0, y), min(height, y + box_h)

        cv2.fillPoly(score_mask, [contour], 1)
        inside = score_mask[y_begin:y_end, x_begin:x_end].astype(bool)
        region = pred[y_begin:y_end, x_begin:x_end]
        values = region[inside & (region > 0)]
        score_mask[y_begin:y_end, x_begin:x_end] = 0

        if values.size == 0:
            return 0.0
        return float(values.astype(np.float64).mean())

    @classmethod
    def unclip_size(cls, width: float, height: float) -> Tuple[int, int]:
        """Grow a rectangle to compensate for the shrunk training targets."""
        area = (width + 1) * (height + 1)
        length = 2 * (width + height + 1)
        expand = 2 * (area * cls.UNCLIP_RATIO / length)
        return round_half_up(width + expand), round_half_up(height + expand)

    def unclip(self, contour: np.ndarray) -> np.ndarray:
        """Padded minimum-area rectangle of a contour, in mask pixels."""
        center, (width, height), angle = normalize_rotated_rect(cv2.minAreaRect(contour))
        new_size = self.unclip_size(width, height)
        return cv2.boxPoints((center, new_size, angle)).astype(np.float32)


class CTCLabelDecoder:
    """CTC decoding for text recognition.

    The last label (index ``len(vocabulary)``) is the blank token. Repeated
    labels collapse unless separated by a different label or a blank.
    """

    def __init__(self, vocabulary: Vocabulary):
        self.vocabulary = vocabulary

    @property
    def label_dimension(self) -> int:
        return len(self.vocabulary) + 1

    def __call__(self, output: TensorBuffer) -> str:
        """Decode one [max_length, label_dimension] output to text."""
        preds_idx = _argmax_rows(output, self.label_dimension)
        vocab_size = len(self.vocabulary)
        char_list = []
        previous = -1
        for index in preds_idx:
            if index != previous and index < vocab_size:
                char_list.append(self.vocabulary.map(index))
            previous = index
        return "".join(char_list)


class EOSLabelDecoder:
    """End-of-string decoding for text recognition.

    Label ``len(vocabulary)`` stops decoding; labels above it are special
    tokens which are skipped.
    """

    def __init__(self, vocabulary: Vocabulary, additional_tokens: int = 0):
        self.vocabulary = vocabulary
        self.additional_tokens = additional_tokens

    @property
    def label_dimension(self) -> int:
        return len(self.vocabulary) + 1 + self.additional_tokens

    def __call__(self, output: TensorBuffer) -> str:
        """Decode one [max_length, label_dimension] output to text."""
        preds_idx = _argmax_rows(output, self.label_dimension)
        vocab_size = len(self.vocabulary)
        char_list = []
        for index in preds_idx:
            if index == vocab_size:
                break
            if index < vocab_size:
                char_list.append(self.vocabulary.map(index))
        return "".join(char_list)


def _argmax_rows(output: TensorBuffer, label_dimension: int) -> List[int]:
    if output.ndim != 2 or output.shape[1] != label_dimension:
        raise ValueError(
            f"Expected [max_length, {label_dimension}] output, got shape {output.shape}"
        )
    return output.as_array().argmax(axis=1).tolist()


class OrientationMapper:
    """Maps orientation classifier labels to TextOrientation."""

    LABELS = (
        TextOrientation.HORIZONTAL,
        TextOrientation.ROTATED_90,
        TextOrientation.ROTATED_180,
        TextOrientation.ROTATED_270,
    )

    def map(self, index: int) -> TextOrientation:
        if index < 0 or index >= len(self.LABELS):
            raise IndexError(f"Index out of bounds: {index}.")
        return self.LABELS[index]

    def __len__(self) -> int:
        return len(self.LABELS)

    def __call__(self, preds: np.ndarray) -> List[TextOrientation]:
        """Convert [N, classes] scores to orientations via argmax."""
        return [self.map(int(index)) for index in preds.argmax(axis=1)]
