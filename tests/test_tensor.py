"""Tests for TensorBuffer."""

import numpy as np
import pytest

from page_ocr.libs.onnx_ocr.tensor import TensorBuffer


class TestTensorBuffer:
    """Tests for shape validation and slicing."""

    def test_shape_and_size(self):
        """Buffer exposes its dimensions."""
        buffer = TensorBuffer(range(24), (2, 3, 4))

        assert buffer.shape == (2, 3, 4)
        assert buffer.ndim == 3
        assert buffer.size == 24
        assert len(buffer) == 2
        assert buffer.dimension(2) == 4

    @pytest.mark.parametrize("shape", [(), (0, 2), (2, -1), (1,) * 9, (True, 2), (1.5, 2)])
    def test_invalid_shape(self, shape):
        """Empty, non-positive, too long or non-integer shapes are rejected."""
        with pytest.raises(ValueError, match="Shape is not valid"):
            TensorBuffer([1.0], shape)

    def test_element_count_mismatch(self):
        """Data must fill the shape exactly."""
        with pytest.raises(ValueError, match="element count"):
            TensorBuffer([1.0, 2.0, 3.0], (2, 2))

    def test_read_only(self):
        """Stored values cannot be modified."""
        buffer = TensorBuffer([1.0, 2.0], (2,))

        with pytest.raises(ValueError):
            buffer.as_array()[0] = 5.0

    def test_sub_array(self):
        """Slicing along the first dimension keeps the remaining shape."""
        buffer = TensorBuffer(np.arange(6), (2, 3))

        sub = buffer.sub_array(1)

        assert sub.shape == (3,)
        assert sub.data.tolist() == [3.0, 4.0, 5.0]

    def test_sub_array_of_vector(self):
        """Slicing a 1-D buffer yields a single-element buffer."""
        sub = TensorBuffer([7.0, 8.0], (2,)).sub_array(1)

        assert sub.shape == (1,)
        assert sub.scalar(0) == 8.0

    def test_sub_array_out_of_range(self):
        """Out of range sub-array index raises IndexError."""
        buffer = TensorBuffer(np.arange(6), (2, 3))

        with pytest.raises(IndexError):
            buffer.sub_array(2)
        with pytest.raises(IndexError):
            buffer.dimension(2)

    def test_scalar(self):
        """Scalars are read from effectively one-dimensional buffers."""
        assert TensorBuffer([1.0, 2.5, 3.0], (3, 1)).scalar(1) == 2.5

        with pytest.raises(ValueError):
            TensorBuffer(np.arange(4), (2, 2)).scalar(0)
        with pytest.raises(IndexError):
            TensorBuffer([1.0], (1,)).scalar(1)

    def test_from_array(self):
        """Arrays are wrapped with their own shape as float32."""
        buffer = TensorBuffer.from_array(np.ones((1, 2, 2), dtype=np.float64))

        assert buffer.shape == (1, 2, 2)
        assert buffer.as_array().dtype == np.float32
