"""
Main Pipeline for page OCR
Loads page images, runs the ONNX OCR stages and exports the recognized text
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
from PIL import Image, ImageSequence

from .libs.onnx_ocr import (
    ClassifierConfig,
    DetectorConfig,
    OCRPipeline,
    OcrError,
    OcrInputError,
    RecognizerConfig,
    TextClassifier,
    TextDetector,
    TextRecognizer,
    TextRecord,
)
from .text_builder import build_text, generify_word_bboxes_by_line


class TextPositioning(Enum):
    """How word boxes are reported."""
    BY_WORDS = "by_words"  # Each box as detected
    BY_LINES = "by_lines"  # Words of one line share the same height


@dataclass
class EngineConfig:
    """Configuration for the OCR engine."""
    text_positioning: TextPositioning = TextPositioning.BY_WORDS


def load_images(path: Union[str, Path]) -> List[np.ndarray]:
    """
    Read an image file as RGB arrays

    Multi-frame files (e.g. multi-page TIFF) return one array per frame.

    Args:
        path: Image file path

    Returns:
        List of (H, W, 3) uint8 arrays

    Raises:
        OcrInputError: If the file cannot be read or decoded
    """
    try:
        with Image.open(path) as image:
            frames = [
                np.array(frame.convert("RGB"))
                for frame in ImageSequence.Iterator(image)
            ]
    except Exception as e:
        raise OcrInputError("Failed to read image.") from e

    if not frames:
        raise OcrInputError("Failed to read image.")
    return frames


class OcrEngine:
    """
    OCR engine producing page-indexed text records

    Workflow:
    1. Text Detection - Find text regions
    2. Orientation Classification (optional) - Rotate crops upright
    3. Text Recognition - Read each region
    4. Text Export - Order records by lines and words

    The engine owns its predictors; close() releases their sessions.
    """

    def __init__(
        self,
        text_detector: TextDetector,
        text_recognizer: TextRecognizer,
        text_classifier: Optional[TextClassifier] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize engine

        Args:
            text_detector: Detection predictor
            text_recognizer: Recognition predictor
            text_classifier: Orientation predictor (optional)
            config: Engine configuration (uses defaults if None)
        """
        self.config = config or EngineConfig()
        self.text_detector = text_detector
        self.text_recognizer = text_recognizer
        self.text_classifier = text_classifier
        self.ocr = OCRPipeline(text_detector, text_recognizer, text_classifier)

    @classmethod
    def from_model_paths(
        cls,
        det_model_path: Union[str, Path],
        rec_model_path: Union[str, Path],
        cls_model_path: Optional[Union[str, Path]] = None,
        det_config: Optional[DetectorConfig] = None,
        rec_config: Optional[RecognizerConfig] = None,
        cls_config: Optional[ClassifierConfig] = None,
        config: Optional[EngineConfig] = None,
        verbose: bool = False,
    ) -> "OcrEngine":
        """
        Load the predictors from ONNX model files

        Args:
            det_model_path: Detection model
            rec_model_path: Recognition model
            cls_model_path: Orientation model; skipped if None
            det_config: Detector configuration (DBNet preset if None)
            rec_config: Recognizer configuration (CRNN VGG16 preset if None)
            cls_config: Classifier configuration (MobileNetV3 preset if None)
            config: Engine configuration
            verbose: Print loading progress
        """
        loaded = []
        try:
            if verbose:
                print("  [1/3] Loading text detector...")
            text_detector = TextDetector(det_model_path, det_config or DetectorConfig.db_net())
            loaded.append(text_detector)

            if verbose:
                print("  [2/3] Loading orientation classifier...")
            text_classifier = None
            if cls_model_path is not None:
                text_classifier = TextClassifier(
                    cls_model_path, cls_config or ClassifierConfig.mobilenet_v3()
                )
                loaded.append(text_classifier)
            elif verbose:
                print("    Skipped (no model)")

            if verbose:
                print("  [3/3] Loading text recognizer...")
            text_recognizer = TextRecognizer(
                rec_model_path, rec_config or RecognizerConfig.crnn_vgg16()
            )
        except Exception:
            for predictor in loaded:
                predictor.close()
            raise

        return cls(text_detector, text_recognizer, text_classifier, config)

    def do_ocr(self, images: Sequence[np.ndarray]) -> Dict[int, List[TextRecord]]:
        """
        Run OCR on in-memory RGB images, one image per page

        Returns:
            Mapping of 1-based page number to text records
        """
        pages = self.ocr(images)
        if self.config.text_positioning == TextPositioning.BY_LINES:
            generify_word_bboxes_by_line(pages)
        return pages

    def do_image_ocr(self, path: Union[str, Path]) -> Dict[int, List[TextRecord]]:
        """
        Run OCR on an image file

        Args:
            path: Image file; every frame of a multi-frame file is a page

        Returns:
            Mapping of 1-based page number to text records
        """
        return self.do_ocr(load_images(path))

    def create_txt_file(self, inputs: Sequence[Union[str, Path]], txt_file: Union[str, Path]) -> str:
        """
        Recognize image files and write their text to one UTF-8 file

        Args:
            inputs: Image files, processed in order
            txt_file: Output text file

        Returns:
            The written text
        """
        content = "".join(build_text(self.do_image_ocr(path)) for path in inputs)
        try:
            Path(txt_file).write_text(content, encoding="utf-8")
        except OSError as e:
            raise OcrError(f"Cannot write to file {txt_file}: {e}") from e
        return content

    def close(self):
        """Release all model sessions."""
        self.text_detector.close()
        if self.text_classifier is not None:
            self.text_classifier.close()
        self.text_recognizer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
