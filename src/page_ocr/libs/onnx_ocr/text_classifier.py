"""
Text Orientation Classification Module - Stage 2 of OCR Pipeline

Detects the rotation of text crops (0, 90, 180 or 270 degrees).
Supports batch processing with independent pre/post-processing.
"""

from pathlib import Path
from typing import List, Tuple, Union

import numpy as np

from .config import ClassifierConfig
from .elements import TextOrientation
from .onnx_base import BatchedPredictor
from .postprocess import OrientationMapper
from .preprocess import rotate, to_bchw_input, truncate_to_ratio
from .tensor import TensorBuffer


class TextClassifier(BatchedPredictor[np.ndarray, TextOrientation]):
    """Text orientation classification module with batch processing.

    Takes text image crops and returns their orientation.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        config: ClassifierConfig = None,
    ):
        """Initialize text classifier.

        Args:
            model_path: Path to orientation ONNX model
            config: Classifier configuration (uses defaults if None)
        """
        if config is None:
            config = ClassifierConfig()

        self.config = config
        self.postprocess_op = OrientationMapper()
        super().__init__(
            model_path,
            config.input_spec,
            output_shape=(-1, len(self.postprocess_op)),
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )

    def to_input_buffer(self, batch: List[np.ndarray]) -> TensorBuffer:
        # Extremely long crops are cut before the square resize
        truncated = [truncate_to_ratio(img, self.config.ratio_limit) for img in batch]
        return to_bchw_input(truncated, self.input_spec)

    def from_output_buffer(self, batch: List[np.ndarray], output: TensorBuffer) -> List[TextOrientation]:
        return self.postprocess_op(output.as_array())

    def classify_and_rotate(
        self,
        img_list: List[np.ndarray],
    ) -> Tuple[List[np.ndarray], List[TextOrientation]]:
        """Classify crops and rotate them upright.

        Args:
            img_list: List of text image crops (RGB)

        Returns:
            Tuple of:
            - List of upright images
            - List of detected orientations
        """
        orientations = list(self.predict(img_list))
        rotated = [rotate(img, orientation) for img, orientation in zip(img_list, orientations)]
        return rotated, orientations
