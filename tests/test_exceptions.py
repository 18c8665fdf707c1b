"""Tests for the error hierarchy."""

import pytest

from page_ocr.libs.onnx_ocr.exceptions import (
    OcrConfigurationError,
    OcrError,
    OcrInputError,
    OcrResourceError,
    ONNXRuntimeError,
    dependency_load_message,
    raise_dependency_error,
)


@pytest.mark.parametrize(
    "error_type",
    [OcrConfigurationError, OcrResourceError, ONNXRuntimeError, OcrInputError],
)
def test_all_errors_are_ocr_errors(error_type):
    assert issubclass(error_type, OcrError)


def test_dependency_message_on_linux():
    message = dependency_load_message("linux")

    assert message.startswith("Failed to load ONNX Runtime native library.")
    assert "Visual C++" not in message


def test_dependency_message_on_windows():
    assert "Visual C++ Redistributable" in dependency_load_message("win32")


def test_raise_dependency_error_chains_cause():
    cause = ImportError("libonnxruntime.so")

    with pytest.raises(OcrResourceError) as excinfo:
        raise_dependency_error(cause)

    assert excinfo.value.__cause__ is cause
