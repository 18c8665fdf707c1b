"""
Text Recognition Module - Stage 3 of OCR Pipeline

Recognizes text from upright text image crops.
Supports batch processing with independent pre/post-processing.
"""

from pathlib import Path
from typing import List, Union

import numpy as np

from .config import RecognizerConfig
from .onnx_base import BatchedPredictor
from .postprocess import CTCLabelDecoder, EOSLabelDecoder
from .preprocess import to_bchw_input
from .tensor import TensorBuffer


def build_decoder(config: RecognizerConfig) -> Union[CTCLabelDecoder, EOSLabelDecoder]:
    """Return the label decoder matching the model family of `config`."""
    if config.decoder == "ctc":
        return CTCLabelDecoder(config.vocabulary)
    return EOSLabelDecoder(config.vocabulary, config.additional_tokens)


class TextRecognizer(BatchedPredictor[np.ndarray, str]):
    """Text recognition module with batch processing.

    Takes text image crops and returns recognized strings.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        config: RecognizerConfig = None,
    ):
        """Initialize text recognizer.

        Args:
            model_path: Path to recognition ONNX model
            config: Recognizer configuration (uses defaults if None)
        """
        if config is None:
            config = RecognizerConfig()

        self.config = config

        # Setup postprocessing (decoder is fixed by the model family)
        self.postprocess_op = build_decoder(config)

        super().__init__(
            model_path,
            config.input_spec,
            output_shape=(-1, -1, self.postprocess_op.label_dimension),
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )

    def to_input_buffer(self, batch: List[np.ndarray]) -> TensorBuffer:
        return to_bchw_input(batch, self.input_spec)

    def from_output_buffer(self, batch: List[np.ndarray], output: TensorBuffer) -> List[str]:
        return [
            self.postprocess_op(output.sub_array(index))
            for index in range(min(len(batch), len(output)))
        ]

    def recognize_single(self, img: np.ndarray) -> str:
        """Recognize text in a single image.

        Args:
            img: Text image crop (RGB)

        Returns:
            Recognized text
        """
        return next(self.predict([img]))
