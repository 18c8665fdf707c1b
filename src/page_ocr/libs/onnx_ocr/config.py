"""Configuration classes for OCR modules."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .exceptions import OcrConfigurationError
from .vocabulary import FRENCH, LEGACY_FRENCH, Vocabulary

_INT32_MAX = 2 ** 31 - 1

# Normalization constants the published weights were trained with
DETECTION_MEAN = (0.798, 0.785, 0.772)
DETECTION_STD = (0.264, 0.2749, 0.287)
RECOGNITION_MEAN = (0.694, 0.695, 0.693)
RECOGNITION_STD = (0.299, 0.296, 0.301)


@dataclass(frozen=True)
class InputSpec:
    """Input tensor properties of an image model (RGB, BCHW)."""
    mean: Tuple[float, float, float]
    std: Tuple[float, float, float]
    shape: Tuple[int, int, int, int]  # [batch, channel, height, width]
    symmetric_pad: bool = False  # Pad around the center instead of bottom/right

    def __post_init__(self):
        object.__setattr__(self, "mean", tuple(self.mean))
        object.__setattr__(self, "std", tuple(self.std))
        object.__setattr__(self, "shape", tuple(self.shape))

        if len(self.mean) != 3:
            raise OcrConfigurationError("mean should be a 3-element array")
        if len(self.std) != 3:
            raise OcrConfigurationError("std should be a 3-element array")
        if len(self.shape) != 4:
            raise OcrConfigurationError("shape should be a 4-element array (BCHW)")
        if self.shape[1] != 3:
            raise OcrConfigurationError(
                "Model only supports RGB images with a BCHW input format"
            )
        for dim in self.shape:
            if (
                isinstance(dim, (bool, np.bool_))
                or not isinstance(dim, (int, np.integer))
                or dim <= 0
                or dim > _INT32_MAX
            ):
                raise OcrConfigurationError(f"Unexpected dimension value: {dim}")
        object.__setattr__(self, "shape", tuple(int(dim) for dim in self.shape))

    @property
    def batch_size(self) -> int:
        return self.shape[0]

    @property
    def channel_count(self) -> int:
        return self.shape[1]

    @property
    def height(self) -> int:
        return self.shape[2]

    @property
    def width(self) -> int:
        return self.shape[3]


@dataclass
class DetectorConfig:
    """Configuration for text detection stage."""
    input_spec: InputSpec = None
    bin_thresh: float = 0.1  # Binarization threshold for the probability map
    box_thresh: float = 0.1  # Minimum mean probability of a text region
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.input_spec is None:
            self.input_spec = InputSpec(
                mean=DETECTION_MEAN,
                std=DETECTION_STD,
                shape=(2, 3, 1024, 1024),
                symmetric_pad=True,
            )

    @classmethod
    def db_net(cls, **kwargs) -> "DetectorConfig":
        """DBNet (db_resnet50, db_mobilenet_v3_large) weights."""
        kwargs.setdefault("bin_thresh", 0.3)
        kwargs.setdefault("box_thresh", 0.1)
        return cls(**kwargs)

    @classmethod
    def fast(cls, **kwargs) -> "DetectorConfig":
        """FAST (fast_tiny, fast_small, fast_base) weights."""
        kwargs.setdefault("bin_thresh", 0.1)
        kwargs.setdefault("box_thresh", 0.1)
        return cls(**kwargs)

    @classmethod
    def linknet(cls, **kwargs) -> "DetectorConfig":
        """LinkNet (linknet_resnet18/34/50) weights."""
        kwargs.setdefault("bin_thresh", 0.1)
        kwargs.setdefault("box_thresh", 0.1)
        return cls(**kwargs)


@dataclass
class ClassifierConfig:
    """Configuration for text orientation classification stage."""
    input_spec: InputSpec = None
    ratio_limit: float = 4.0  # Crops are truncated to this aspect ratio
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.input_spec is None:
            self.input_spec = InputSpec(
                mean=RECOGNITION_MEAN,
                std=RECOGNITION_STD,
                shape=(512, 3, 256, 256),
                symmetric_pad=True,
            )

    @classmethod
    def mobilenet_v3(cls, **kwargs) -> "ClassifierConfig":
        """mobilenet_v3_small_crop_orientation weights."""
        return cls(**kwargs)


@dataclass
class RecognizerConfig:
    """Configuration for text recognition stage."""
    input_spec: InputSpec = None
    decoder: str = "ctc"  # 'ctc' or 'eos'
    vocabulary: Vocabulary = None
    additional_tokens: int = 0  # Labels after the EOS token (e.g. SOS, PAD)
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.input_spec is None:
            self.input_spec = InputSpec(
                mean=RECOGNITION_MEAN,
                std=RECOGNITION_STD,
                shape=(512, 3, 32, 128),
                symmetric_pad=False,
            )
        if self.vocabulary is None:
            self.vocabulary = FRENCH
        if self.decoder not in ("ctc", "eos"):
            raise OcrConfigurationError(f"Unknown decoder: {self.decoder}")
        if self.decoder == "ctc" and self.additional_tokens:
            raise OcrConfigurationError("CTC decoder does not use additional tokens")
        if self.additional_tokens < 0:
            raise OcrConfigurationError("additional_tokens should not be negative")

    @classmethod
    def crnn_vgg16(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", LEGACY_FRENCH)
        return cls(decoder="ctc", **kwargs)

    @classmethod
    def crnn_mobilenet_v3(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", FRENCH)
        return cls(decoder="ctc", **kwargs)

    @classmethod
    def master(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", FRENCH)
        return cls(decoder="eos", additional_tokens=2, **kwargs)

    @classmethod
    def parseq(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", FRENCH)
        kwargs.setdefault("additional_tokens", 0)
        return cls(decoder="eos", **kwargs)

    @classmethod
    def sar(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", FRENCH)
        return cls(decoder="eos", additional_tokens=0, **kwargs)

    @classmethod
    def vitstr(cls, **kwargs) -> "RecognizerConfig":
        kwargs.setdefault("vocabulary", FRENCH)
        return cls(decoder="eos", additional_tokens=0, **kwargs)


DETECTOR_ARCHITECTURES = {
    "db_net": DetectorConfig.db_net,
    "fast": DetectorConfig.fast,
    "linknet": DetectorConfig.linknet,
}

RECOGNIZER_ARCHITECTURES = {
    "crnn_vgg16": RecognizerConfig.crnn_vgg16,
    "crnn_mobilenet_v3": RecognizerConfig.crnn_mobilenet_v3,
    "master": RecognizerConfig.master,
    "parseq": RecognizerConfig.parseq,
    "sar": RecognizerConfig.sar,
    "vitstr": RecognizerConfig.vitstr,
}
