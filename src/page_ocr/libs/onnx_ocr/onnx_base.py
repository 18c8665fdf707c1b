"""Base class for batched ONNX Runtime inference with GPU/TensorRT support."""

from pathlib import Path
from typing import Generic, Iterable, Iterator, List, Sequence, TypeVar, Union

import numpy as np

from .batching import batched
from .config import InputSpec
from .exceptions import (
    OcrConfigurationError,
    OcrError,
    OcrResourceError,
    ONNXRuntimeError,
    raise_dependency_error,
)
from .tensor import TensorBuffer

try:
    from onnxruntime import (
        ExecutionMode,
        GraphOptimizationLevel,
        InferenceSession,
        SessionOptions,
    )
    from onnxruntime.capi import _pybind_state as C
except (ImportError, OSError) as e:
    raise_dependency_error(e)

T = TypeVar("T")
R = TypeVar("R")

FLOAT_TENSOR_TYPE = "tensor(float)"


class BatchedPredictor(Generic[T, R]):
    """Base class for ONNX models consuming image batches.

    Subclasses convert a batch of inputs to a single input tensor and the
    model output back to one result per input. Inputs are grouped in batches
    of ``input_spec.batch_size``; each batch is one ``session.run`` call.

    A predictor is not safe for concurrent use from several threads.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        input_spec: InputSpec,
        output_shape: Sequence[int],
        use_gpu: bool = False,
        use_tensorrt: bool = False,
    ):
        """Initialize ONNX Runtime session and validate the model.

        Args:
            model_path: Path to ONNX model file
            input_spec: Expected input tensor properties
            output_shape: Expected output shape (-1 for dynamic dimensions)
            use_gpu: Enable CUDA GPU acceleration
            use_tensorrt: Enable TensorRT acceleration (requires TensorRT)

        Raises:
            FileNotFoundError: If the model file does not exist
            OcrResourceError: If the session could not be created
            OcrConfigurationError: If the model does not match the input spec
        """
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model not found: {model_path}")

        self.input_spec = input_spec
        self.output_shape = tuple(output_shape)
        self._closed = False
        self.session = None

        try:
            self.sess_opt = self._init_sess_opt()
        except Exception as e:
            raise OcrResourceError("Failed to init ONNX Runtime session options") from e

        # Setup providers (TensorRT > CUDA > CPU)
        providers = self._get_providers(use_gpu, use_tensorrt)

        try:
            self.session = InferenceSession(
                str(self.model_path),
                sess_options=self.sess_opt,
                providers=providers,
            )
        except Exception as e:
            self.sess_opt = None
            raise OcrResourceError("Failed to init ONNX Runtime session") from e

        try:
            self._validate_model()
        except OcrConfigurationError as e:
            self.close()
            raise OcrConfigurationError("ONNX Runtime model did not pass validation") from e

        self.input_name = self.session.get_inputs()[0].name
        self.output_name = self.session.get_outputs()[0].name

    @staticmethod
    def _init_sess_opt() -> SessionOptions:
        sess_opt = SessionOptions()
        sess_opt.log_severity_level = 4
        sess_opt.execution_mode = ExecutionMode.ORT_SEQUENTIAL
        sess_opt.graph_optimization_level = GraphOptimizationLevel.ORT_ENABLE_ALL
        return sess_opt

    @staticmethod
    def _get_providers(use_gpu: bool, use_tensorrt: bool) -> List:
        """Get execution providers based on hardware availability.

        Priority: TensorRT > CUDA > CPU
        """
        available_providers = C.get_available_providers()
        providers = []

        if use_tensorrt and "TensorrtExecutionProvider" in available_providers:
            providers.append(("TensorrtExecutionProvider", {}))

        if use_gpu and "CUDAExecutionProvider" in available_providers:
            providers.append((
                "CUDAExecutionProvider",
                {"cudnn_conv_algo_search": "DEFAULT"}
            ))

        # CPU (always available as fallback)
        providers.append("CPUExecutionProvider")

        return providers

    def _validate_model(self):
        inputs = self.session.get_inputs()
        if len(inputs) != 1:
            raise OcrConfigurationError(f"Expected 1 input, but got {len(inputs)} instead")
        if inputs[0].type != FLOAT_TENSOR_TYPE:
            raise OcrConfigurationError("Unexpected input type, expected float32 tensor")
        if not shapes_compatible(self.input_spec.shape, inputs[0].shape):
            raise OcrConfigurationError(
                f"Expected {list(self.input_spec.shape)} input shape, "
                f"but got {list(inputs[0].shape)} instead"
            )

        outputs = self.session.get_outputs()
        if len(outputs) != 1:
            raise OcrConfigurationError(f"Expected 1 output, but got {len(outputs)} instead")
        if outputs[0].type != FLOAT_TENSOR_TYPE:
            raise OcrConfigurationError("Unexpected output type, expected float32 tensor")
        if not shapes_compatible(self.output_shape, outputs[0].shape):
            raise OcrConfigurationError(
                f"Expected {list(self.output_shape)} output shape, "
                f"but got {list(outputs[0].shape)} instead"
            )

    @property
    def closed(self) -> bool:
        return self._closed

    def predict(self, inputs: Iterable[T]) -> Iterator[R]:
        """Run the model lazily over a sequence of inputs.

        Args:
            inputs: Items to process; pulled on demand

        Returns:
            Iterator of results in input order, one per input

        Raises:
            OcrError: If the predictor has been closed
        """
        if self._closed:
            raise OcrError("Predictor is closed")
        return self._predict_batches(batched(inputs, self.input_spec.batch_size))

    def __call__(self, inputs: Iterable[T]) -> List[R]:
        """Run the model over all inputs and collect the results."""
        return list(self.predict(inputs))

    def _predict_batches(self, batches: Iterator[List[T]]) -> Iterator[R]:
        for batch in batches:
            output = self.run(self.to_input_buffer(batch))
            results = self.from_output_buffer(batch, output)
            if len(results) != len(batch):
                raise OcrError("Batch processing failed: invalid number of outputs.")
            yield from results

    def run(self, input_buffer: TensorBuffer) -> TensorBuffer:
        """Run inference on one input tensor.

        Args:
            input_buffer: Batch tensor matching the input spec

        Returns:
            Model output tensor

        Raises:
            ONNXRuntimeError: If ONNX Runtime fails
        """
        if self._closed:
            raise OcrError("Predictor is closed")
        input_feed = {self.input_name: np.ascontiguousarray(input_buffer.as_array())}
        try:
            outputs = self.session.run([self.output_name], input_feed)
        except Exception as e:
            raise ONNXRuntimeError("ONNX Runtime operation failed") from e
        return TensorBuffer.from_array(outputs[0])

    def to_input_buffer(self, batch: List[T]) -> TensorBuffer:
        """Convert a batch of inputs to the model input tensor."""
        raise NotImplementedError

    def from_output_buffer(self, batch: List[T], output: TensorBuffer) -> List[R]:
        """Convert the model output tensor to one result per input."""
        raise NotImplementedError

    def close(self):
        """Release the session and its options. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.session = None
        self.sess_opt = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f"{type(self).__name__}(model_path={str(self.model_path)!r})"


def shapes_compatible(expected: Sequence[int], actual: Sequence) -> bool:
    """Check two tensor shapes, treating -1 and symbolic dimensions as wildcards."""
    if len(expected) != len(actual):
        return False
    for expected_dim, actual_dim in zip(expected, actual):
        expected_dim = _as_dimension(expected_dim)
        actual_dim = _as_dimension(actual_dim)
        if expected_dim == -1 or actual_dim == -1:
            continue
        if expected_dim != actual_dim:
            return False
    return True


def _as_dimension(dim) -> int:
    # ONNX Runtime reports dynamic axes as strings or None
    if isinstance(dim, (int, np.integer)) and not isinstance(dim, bool):
        return int(dim)
    return -1
