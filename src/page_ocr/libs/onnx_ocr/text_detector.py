"""
Text Detection Module - Stage 1 of OCR Pipeline

Detects text regions in images using segmentation models (DBNet, FAST, LinkNet).
Supports batch processing with independent pre/post-processing.
"""

from pathlib import Path
from typing import List, Union

import numpy as np

from .config import DetectorConfig
from .onnx_base import BatchedPredictor
from .postprocess import DetectionPostProcessor
from .preprocess import LetterboxTransform, to_bchw_input
from .tensor import TensorBuffer


def expit(x: np.ndarray) -> np.ndarray:
    """Logistic sigmoid without overflow for large negative inputs."""
    return 0.5 * (1.0 + np.tanh(0.5 * x))


class TextDetector(BatchedPredictor[np.ndarray, List[np.ndarray]]):
    """Text detection module with batch processing support.

    Takes RGB images and returns, for each, a list of (4, 2) boxes in
    source image pixels, ordered bottom-left, top-left, top-right,
    bottom-right.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        config: DetectorConfig = None,
    ):
        """Initialize text detector.

        Args:
            model_path: Path to detection ONNX model
            config: Detector configuration (uses defaults if None)
        """
        if config is None:
            config = DetectorConfig()

        self.config = config
        input_spec = config.input_spec
        super().__init__(
            model_path,
            input_spec,
            output_shape=(-1, 1, input_spec.height, input_spec.width),
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )

        self.postprocess_op = DetectionPostProcessor(
            bin_thresh=config.bin_thresh,
            box_thresh=config.box_thresh,
        )

    def to_input_buffer(self, batch: List[np.ndarray]) -> TensorBuffer:
        return to_bchw_input(batch, self.input_spec)

    def from_output_buffer(self, batch: List[np.ndarray], output: TensorBuffer) -> List[List[np.ndarray]]:
        # Models output logits
        prob_maps = TensorBuffer.from_array(expit(output.as_array()))

        all_boxes = []
        for index in range(min(len(batch), len(prob_maps))):
            transform = LetterboxTransform.for_image(batch[index], self.input_spec)
            relative_boxes = self.postprocess_op(prob_maps.sub_array(index))
            all_boxes.append([transform.to_source(box) for box in relative_boxes])
        return all_boxes

    def detect_single(self, image: np.ndarray) -> List[np.ndarray]:
        """Detect text in a single image.

        Args:
            image: Input image as numpy array (H, W, 3) in RGB

        Returns:
            List of (4, 2) boxes in pixels
        """
        return next(self.predict([image]))
