"""Read-only multidimensional float buffer exchanged with ONNX Runtime."""

from typing import Sequence, Tuple, Union

import numpy as np


class TensorBuffer:
    """Flat float32 data with an explicit shape.

    The buffer never copies on slicing: ``sub_array`` returns a view over the
    same memory. The underlying array is marked read-only.
    """

    MAX_DIMENSIONS = 8

    def __init__(self, data: Union[np.ndarray, Sequence[float]], shape: Sequence[int]):
        """Create a buffer.

        Args:
            data: Flat (or already shaped) float values
            shape: Dimensions, 1 to 8 positive integers

        Raises:
            ValueError: If the shape is invalid or does not match the data
        """
        shape = tuple(shape)
        if not self.is_valid_shape(shape):
            raise ValueError("Shape is not valid")
        shape = tuple(int(dim) for dim in shape)

        flat = np.asarray(data, dtype=np.float32).reshape(-1)
        if flat.size != int(np.prod(shape, dtype=np.int64)):
            raise ValueError("Data element count does not match shape")

        array = flat.reshape(shape).view()
        array.flags.writeable = False
        self._array = array

    @classmethod
    def from_array(cls, array: np.ndarray) -> "TensorBuffer":
        """Wrap an already shaped numpy array."""
        array = np.asarray(array, dtype=np.float32)
        return cls(array, array.shape)

    @classmethod
    def is_valid_shape(cls, shape: Tuple) -> bool:
        if len(shape) == 0 or len(shape) > cls.MAX_DIMENSIONS:
            return False
        for dim in shape:
            if isinstance(dim, (bool, np.bool_)):
                return False
            if not isinstance(dim, (int, np.integer)) or dim <= 0:
                return False
        return True

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._array.shape

    @property
    def ndim(self) -> int:
        return self._array.ndim

    @property
    def size(self) -> int:
        return self._array.size

    @property
    def data(self) -> np.ndarray:
        """Flat read-only view of the values."""
        return self._array.reshape(-1)

    def as_array(self) -> np.ndarray:
        """Shaped read-only view of the values."""
        return self._array

    def dimension(self, index: int) -> int:
        if index < 0 or index >= self.ndim:
            raise IndexError(f"Dimension index out of range: {index}")
        return self.shape[index]

    def sub_array(self, index: int) -> "TensorBuffer":
        """Slice along the first dimension.

        Args:
            index: Position along the first dimension

        Returns:
            Buffer of shape ``shape[1:]`` (``(1,)`` when slicing a 1-D buffer)
        """
        if index < 0 or index >= self.shape[0]:
            raise IndexError(f"Sub-array index out of range: {index}")
        sub = self._array[index]
        if sub.ndim == 0:
            sub = sub.reshape(1)
        return TensorBuffer(sub, sub.shape)

    def scalar(self, index: int) -> float:
        """Read one value from an effectively one-dimensional buffer."""
        if self.size != self.shape[0]:
            raise ValueError("Buffer is not one-dimensional")
        if index < 0 or index >= self.size:
            raise IndexError(f"Scalar index out of range: {index}")
        return float(self.data[index])

    def __len__(self) -> int:
        return self.shape[0]

    def __repr__(self):
        return f"TensorBuffer(shape={self.shape})"
