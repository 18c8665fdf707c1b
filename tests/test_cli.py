"""Tests for the command line interface."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from page_ocr.cli import main
from page_ocr.libs.onnx_ocr.config import RecognizerConfig
from page_ocr.libs.onnx_ocr.text_recognizer import build_decoder


@pytest.fixture
def models(register_model):
    """Detector that finds nothing and a CRNN VGG16 shaped recognizer."""

    def no_text(array):
        return np.full((array.shape[0], 1, 1024, 1024), -10.0, dtype=np.float32)

    label_dimension = build_decoder(RecognizerConfig.crnn_vgg16()).label_dimension
    det_path, _ = register_model("det.onnx", [-1, 3, 1024, 1024], [-1, 1, 1024, 1024], no_text)
    rec_path, _ = register_model("rec.onnx", [-1, 3, 32, 128], [-1, -1, label_dimension])
    return ["--det-model", str(det_path), "--rec-model", str(rec_path)]


@pytest.fixture
def page_file(tmp_path: Path) -> Path:
    path = tmp_path / "blank.png"
    Image.new("RGB", (64, 48), color=(255, 255, 255)).save(path)
    return path


def test_missing_input(tmp_path: Path, models, capsys):
    assert main([str(tmp_path / "missing.png")] + models) == 1
    assert "not found" in capsys.readouterr().err


def test_prints_text(page_file, models, capsys):
    assert main([str(page_file)] + models) == 0
    assert capsys.readouterr().out == "\n"


def test_writes_output_file(page_file, models, tmp_path: Path, capsys):
    output = tmp_path / "result.txt"

    assert main([str(page_file), "-o", str(output)] + models) == 0
    assert output.read_text(encoding="utf-8") == "\n"
    assert "Saved to:" in capsys.readouterr().out


def test_verbose_banner(page_file, models, capsys):
    assert main([str(page_file), "-v"] + models) == 0

    out = capsys.readouterr().out
    assert "Page OCR CLI" in out
    assert "[1/3] Loading text detector..." in out
    assert "Processing complete!" in out


def test_incompatible_model(page_file, models, capsys):
    # MASTER expects two more labels than the registered recognizer provides
    assert main([str(page_file), "--rec-arch", "master"] + models) == 1
    assert "did not pass validation" in capsys.readouterr().err


def test_unknown_architecture(page_file, models):
    with pytest.raises(SystemExit) as excinfo:
        main([str(page_file), "--det-arch", "east"] + models)

    assert excinfo.value.code == 2
