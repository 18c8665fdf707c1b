"""Exceptions raised by the OCR library."""

import sys


class OcrError(Exception):
    """Base class for all OCR errors."""
    pass


class OcrConfigurationError(OcrError, ValueError):
    """Invalid input properties or a model that does not match them."""
    pass


class OcrResourceError(OcrError):
    """ONNX Runtime session, options or native library could not be set up."""
    pass


class ONNXRuntimeError(OcrError):
    """Exception raised when ONNX Runtime fails to run a batch."""
    pass


class OcrInputError(OcrError):
    """Input image could not be read or decoded."""
    pass


def dependency_load_message(platform: str = None) -> str:
    """Build the diagnostic shown when the ONNX Runtime native library fails to load.

    Args:
        platform: Platform string to check (defaults to sys.platform)

    Returns:
        Message with a hint about the likely cause
    """
    if platform is None:
        platform = sys.platform

    message = (
        "Failed to load ONNX Runtime native library.\n"
        "Double check that correct RuntimeIdentifier is specified."
    )
    if platform.startswith("win"):
        message += (
            "\nOn Windows make sure the latest Microsoft Visual C++ "
            "Redistributable is installed."
        )
    return message


def raise_dependency_error(exc: BaseException):
    """Re-raise a native library load failure as OcrResourceError."""
    raise OcrResourceError(dependency_load_message()) from exc
