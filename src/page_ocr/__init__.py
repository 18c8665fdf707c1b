"""
Page OCR Library
Text detection, orientation and recognition for page images with ONNX models
"""

from .pipeline import EngineConfig, OcrEngine, TextPositioning, load_images
from .text_builder import build_text, generify_word_bboxes_by_line
from .libs.onnx_ocr import (
    ClassifierConfig,
    DetectorConfig,
    OCRPipeline,
    OcrError,
    Rectangle,
    RecognizerConfig,
    TextClassifier,
    TextDetector,
    TextOrientation,
    TextRecognizer,
    TextRecord,
)

__version__ = "0.1.0"
__all__ = [
    'OcrEngine',
    'EngineConfig',
    'TextPositioning',
    'load_images',
    'build_text',
    'generify_word_bboxes_by_line',
    'OCRPipeline',
    'TextDetector',
    'TextClassifier',
    'TextRecognizer',
    'DetectorConfig',
    'ClassifierConfig',
    'RecognizerConfig',
    'Rectangle',
    'TextOrientation',
    'TextRecord',
    'OcrError',
]
