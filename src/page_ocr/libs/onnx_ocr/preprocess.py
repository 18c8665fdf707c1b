"""Preprocessing operations for OCR."""

import math
from typing import List, Sequence

import cv2
import numpy as np

from .config import InputSpec
from .elements import TextOrientation
from .tensor import TensorBuffer


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class LetterboxTransform:
    """Aspect-ratio preserving resize of a source image into a model input.

    The image is scaled to fit the target size and the remaining area is
    padded with black, either on the bottom/right or evenly on both sides.
    """

    def __init__(
        self,
        source_width: int,
        source_height: int,
        target_width: int,
        target_height: int,
        symmetric_pad: bool = False,
    ):
        self.source_width = source_width
        self.source_height = source_height
        self.target_width = target_width
        self.target_height = target_height
        self.symmetric_pad = symmetric_pad

        width_ratio = target_width / source_width
        height_ratio = target_height / source_height
        if height_ratio > width_ratio:
            # Padding along the y axis
            self.scaled_width = target_width
            self.scaled_height = max(1, round_half_up(source_height * width_ratio))
        else:
            # Padding along the x axis
            self.scaled_width = max(1, round_half_up(source_width * height_ratio))
            self.scaled_height = target_height

        if symmetric_pad:
            self.x_offset = (target_width - self.scaled_width) // 2
            self.y_offset = (target_height - self.scaled_height) // 2
        else:
            self.x_offset = 0
            self.y_offset = 0

    @classmethod
    def for_image(cls, image: np.ndarray, input_spec: InputSpec) -> "LetterboxTransform":
        height, width = image.shape[:2]
        return cls(width, height, input_spec.width, input_spec.height, input_spec.symmetric_pad)

    def to_source(self, points: np.ndarray) -> np.ndarray:
        """Map [0, 1] relative model-input points to source image pixels.

        Args:
            points: Array (..., 2) of relative x, y coordinates

        Returns:
            New array of absolute pixel coordinates, clamped to the image
        """
        points = np.asarray(points, dtype=np.float32)
        result = np.empty_like(points)
        x = points[..., 0] * self.target_width - self.x_offset
        y = points[..., 1] * self.target_height - self.y_offset
        result[..., 0] = np.clip(x * self.source_width / self.scaled_width, 0, self.source_width)
        result[..., 1] = np.clip(y * self.source_height / self.scaled_height, 0, self.source_height)
        return result

    def to_target(self, points: np.ndarray) -> np.ndarray:
        """Map source image pixels to [0, 1] relative model-input points."""
        points = np.asarray(points, dtype=np.float32)
        result = np.empty_like(points)
        x = points[..., 0] * self.scaled_width / self.source_width + self.x_offset
        y = points[..., 1] * self.scaled_height / self.source_height + self.y_offset
        result[..., 0] = x / self.target_width
        result[..., 1] = y / self.target_height
        return result

    def __call__(self, image: np.ndarray) -> np.ndarray:
        """Resize and pad an image (H, W, C) to the target size."""
        padding_im = np.zeros(
            (self.target_height, self.target_width) + image.shape[2:], dtype=image.dtype
        )
        if image.shape[:2] == (self.scaled_height, self.scaled_width):
            resized_image = image
        else:
            resized_image = cv2.resize(
                image,
                (self.scaled_width, self.scaled_height),
                interpolation=cv2.INTER_LINEAR,
            )
        padding_im[
            self.y_offset:self.y_offset + self.scaled_height,
            self.x_offset:self.x_offset + self.scaled_width,
        ] = resized_image
        return padding_im


class NormalizeImage:
    """Normalize RGB pixel values and convert HWC to CHW."""

    def __init__(self, mean: Sequence[float], std: Sequence[float]):
        self.scale = np.float32(1.0 / 255.0)
        self.mean = np.array(mean).reshape((1, 1, 3)).astype("float32")
        self.std = np.array(std).reshape((1, 1, 3)).astype("float32")

    def __call__(self, image: np.ndarray) -> np.ndarray:
        img = image.astype("float32") * self.scale
        img = (img - self.mean) / self.std
        return img.transpose((2, 0, 1))


def resize_to_input(image: np.ndarray, input_spec: InputSpec) -> np.ndarray:
    """Letterbox an image into the model input size."""
    return LetterboxTransform.for_image(image, input_spec)(image)


def to_bchw_input(images: List[np.ndarray], input_spec: InputSpec) -> TensorBuffer:
    """Build a normalized BCHW input tensor from RGB images.

    Args:
        images: RGB images (H, W, 3), uint8
        input_spec: Model input properties

    Returns:
        Tensor of shape [len(images), 3, height, width]

    Raises:
        ValueError: If there are more images than the batch size or an
            image is not RGB
    """
    if len(images) > input_spec.batch_size:
        raise ValueError(
            f"Too many images ({len(images)}) for the provided batch size ({input_spec.batch_size})"
        )
    normalize = NormalizeImage(input_spec.mean, input_spec.std)
    norm_img_batch = []
    for image in images:
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError("to_bchw_input only supports RGB images")
        norm_img = normalize(resize_to_input(image, input_spec))
        norm_img_batch.append(norm_img[np.newaxis, :])
    if not norm_img_batch:
        raise ValueError("to_bchw_input requires at least one image")
    return TensorBuffer.from_array(np.concatenate(norm_img_batch))


def truncate_to_ratio(image: np.ndarray, max_ratio: float) -> np.ndarray:
    """Cut the longer side so the aspect ratio does not exceed max_ratio.

    The leading (left or top) part of the image is kept.
    """
    height, width = image.shape[:2]
    if width > height * max_ratio:
        return image[:, :max(1, round_half_up(height * max_ratio))]
    if height > width * max_ratio:
        return image[:max(1, round_half_up(width * max_ratio))]
    return image


def rotate(image: np.ndarray, orientation: TextOrientation) -> np.ndarray:
    """Rotate a crop with the given text orientation back to horizontal."""
    if orientation == TextOrientation.ROTATED_90:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)
    if orientation == TextOrientation.ROTATED_180:
        return cv2.rotate(image, cv2.ROTATE_180)
    if orientation == TextOrientation.ROTATED_270:
        return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)
    return image
