"""
High-level OCR Pipeline
Combines the three modular stages into page-indexed text records
"""

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .elements import TextOrientation, TextRecord
from .text_classifier import TextClassifier
from .text_detector import TextDetector
from .text_recognizer import TextRecognizer
from .utils import (
    extract_crops,
    merge_split_results,
    split_text_images,
    to_page_rectangle,
)


class OCRPipeline:
    """
    Complete OCR pipeline combining detection, orientation and recognition.

    Usage:
        ocr = OCRPipeline(detector, recognizer, classifier)
        pages = ocr(images)   # {1: [TextRecord, ...], 2: [...]}

    The predictors are owned by the caller; the pipeline does not close them.
    """

    def __init__(
        self,
        text_detector: TextDetector,
        text_recognizer: TextRecognizer,
        text_classifier: Optional[TextClassifier] = None,
    ):
        """
        Initialize OCR pipeline

        Args:
            text_detector: Detection predictor
            text_recognizer: Recognition predictor
            text_classifier: Orientation predictor; without it all text is
                assumed horizontal
        """
        self.text_detector = text_detector
        self.text_recognizer = text_recognizer
        self.text_classifier = text_classifier

    def __call__(self, images: Sequence[np.ndarray]) -> Dict[int, List[TextRecord]]:
        """
        Run OCR over a list of RGB images

        Args:
            images: Images (H, W, 3), one per page

        Returns:
            Mapping of 1-based page number to the text records of that page
        """
        return dict(self.iter_pages(images))

    def iter_pages(self, images: Sequence[np.ndarray]) -> Iterator[Tuple[int, List[TextRecord]]]:
        """Lazily yield (page number, records), one image at a time."""
        # Stage 1: Detect text regions (batched across images)
        boxes_per_image = self.text_detector.predict(images)
        for index, (img, dt_boxes) in enumerate(zip(images, boxes_per_image)):
            yield index + 1, self.process_image(img, dt_boxes)

    def process_image(self, img: np.ndarray, dt_boxes: List[np.ndarray]) -> List[TextRecord]:
        """Recognize the detected regions of one image."""
        if len(dt_boxes) == 0:
            return []

        # Stage 2: Crop text patches
        img_crop_list = extract_crops(img, dt_boxes)

        # Stage 3: Classify orientation (optional)
        if self.text_classifier is not None:
            img_crop_list, orientations = self.text_classifier.classify_and_rotate(img_crop_list)
        else:
            orientations = [TextOrientation.HORIZONTAL] * len(img_crop_list)

        # Stage 4: Recognize text
        texts = self.recognize(img_crop_list)

        image_height = img.shape[0]
        return [
            TextRecord(text, to_page_rectangle(box, image_height), orientation)
            for box, text, orientation in zip(dt_boxes, texts, orientations)
        ]

    def recognize(self, img_crop_list: List[np.ndarray]) -> List[str]:
        """Recognize crops, splitting wide ones and merging the parts back."""
        split = split_text_images(img_crop_list)
        rec_res = self.text_recognizer.predict(split.images)
        return merge_split_results(rec_res, split.counts)

    def __repr__(self):
        return (
            f"OCRPipeline(\n"
            f"  detector={self.text_detector},\n"
            f"  classifier={self.text_classifier},\n"
            f"  recognizer={self.text_recognizer}\n"
            f")"
        )
