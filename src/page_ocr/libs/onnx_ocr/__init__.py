"""
Modular ONNX OCR library

Three independent stages, each a batched ONNX Runtime predictor:
- TextDetector: Finds text regions in images
- TextClassifier: Detects text orientation
- TextRecognizer: Converts text images to strings

Each module has its own pre/post-processing and model-family presets.

High-level interface:
- OCRPipeline: Complete OCR pipeline (detection + orientation + recognition)
"""

from .config import (
    ClassifierConfig,
    DetectorConfig,
    InputSpec,
    RecognizerConfig,
)
from .elements import Rectangle, TextOrientation, TextRecord
from .exceptions import (
    OcrConfigurationError,
    OcrError,
    OcrInputError,
    OcrResourceError,
    ONNXRuntimeError,
)
from .pipeline import OCRPipeline
from .tensor import TensorBuffer
from .text_classifier import TextClassifier
from .text_detector import TextDetector
from .text_recognizer import TextRecognizer
from .vocabulary import Vocabulary

__all__ = [
    "TextDetector",
    "TextClassifier",
    "TextRecognizer",
    "DetectorConfig",
    "ClassifierConfig",
    "RecognizerConfig",
    "InputSpec",
    "OCRPipeline",
    "TensorBuffer",
    "Vocabulary",
    "Rectangle",
    "TextOrientation",
    "TextRecord",
    "OcrError",
    "OcrConfigurationError",
    "OcrResourceError",
    "OcrInputError",
    "ONNXRuntimeError",
]
