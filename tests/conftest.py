"""Shared fixtures for page OCR tests."""

from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

import numpy as np
import pytest

from page_ocr.libs.onnx_ocr import onnx_base


class FakeNodeArg:
    """Stand-in for onnxruntime.NodeArg."""

    def __init__(self, name: str, shape: Sequence, type: str = "tensor(float)"):
        self.name = name
        self.shape = list(shape)
        self.type = type


class FakeSession:
    """Stand-in for onnxruntime.InferenceSession with a scripted run()."""

    def __init__(
        self,
        input_shape: Sequence,
        output_shape: Sequence,
        run_fn: Optional[Callable[[np.ndarray], np.ndarray]] = None,
        input_type: str = "tensor(float)",
        output_type: str = "tensor(float)",
        input_count: int = 1,
    ):
        self.inputs = [
            FakeNodeArg(f"input_{i}", input_shape, input_type) for i in range(input_count)
        ]
        self.outputs = [FakeNodeArg("output", output_shape, output_type)]
        self.run_fn = run_fn
        self.batch_shapes = []
        self.providers = None

    def get_inputs(self):
        return self.inputs

    def get_outputs(self):
        return self.outputs

    def run(self, output_names, input_feed):
        assert output_names == ["output"]
        (array,) = input_feed.values()
        self.batch_shapes.append(array.shape)
        return [self.run_fn(array)]


@pytest.fixture
def fake_sessions(monkeypatch) -> Dict[str, FakeSession]:
    """Replace InferenceSession; sessions are looked up by model file name."""
    sessions: Dict[str, FakeSession] = {}

    def inference_session(path, sess_options=None, providers=None):
        name = Path(path).name
        if name not in sessions:
            raise RuntimeError(f"Cannot load model {name}")
        session = sessions[name]
        session.providers = providers
        return session

    monkeypatch.setattr(onnx_base, "InferenceSession", inference_session)
    return sessions


@pytest.fixture
def register_model(tmp_path: Path, fake_sessions):
    """Create a model file backed by a FakeSession."""

    def register(name: str, *args, **kwargs):
        path = tmp_path / name
        path.write_bytes(b"onnx")
        session = FakeSession(*args, **kwargs)
        fake_sessions[name] = session
        return path, session

    return register


def one_hot_rows(indices: Sequence[int], label_dimension: int) -> np.ndarray:
    """Recognition output rows whose argmax is the given label sequence."""
    rows = np.zeros((len(indices), label_dimension), dtype=np.float32)
    rows[np.arange(len(indices)), indices] = 1.0
    return rows


@pytest.fixture
def one_hot():
    return one_hot_rows


@pytest.fixture
def rgb_image():
    """Factory for solid-color uint8 RGB images."""

    def make(height: int, width: int, value: int = 128) -> np.ndarray:
        return np.full((height, width, 3), value, dtype=np.uint8)

    return make
