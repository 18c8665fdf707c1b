"""Tests for detection and recognition post-processing."""

import numpy as np
import pytest

from page_ocr.libs.onnx_ocr.elements import TextOrientation
from page_ocr.libs.onnx_ocr.postprocess import (
    CTCLabelDecoder,
    DetectionPostProcessor,
    EOSLabelDecoder,
    OrientationMapper,
    normalize_rotated_rect,
)
from page_ocr.libs.onnx_ocr.tensor import TensorBuffer
from page_ocr.libs.onnx_ocr.vocabulary import Vocabulary


def square_map(size: int = 4, block: int = 3, value: float = 0.9) -> np.ndarray:
    prob = np.zeros((1, size, size), dtype=np.float32)
    prob[0, :block, :block] = value
    return prob


class TestDetectionPostProcessor:
    """Tests for probability map to box conversion."""

    def test_single_region(self):
        """A 3x3 block becomes one padded box in relative coordinates."""
        post = DetectionPostProcessor()

        boxes, scores = post.boxes_from_bitmap(square_map()[0])

        assert len(boxes) == 1
        assert scores[0] == pytest.approx(0.9)
        box = boxes[0]
        assert box.shape == (4, 2)
        assert box.min(axis=0).tolist() == pytest.approx([0.0, 0.0])
        assert box.max(axis=0).tolist() == pytest.approx([0.875, 0.875])

    def test_accepts_channel_dimension(self):
        boxes = DetectionPostProcessor()(TensorBuffer.from_array(square_map()))

        assert len(boxes) == 1

    def test_low_score_region_dropped(self):
        post = DetectionPostProcessor(bin_thresh=0.3, box_thresh=0.95)

        assert post(TensorBuffer.from_array(square_map())) == []

    def test_empty_map(self):
        assert DetectionPostProcessor()(TensorBuffer.from_array(np.zeros((1, 8, 8)))) == []

    def test_speckles_removed(self):
        """Isolated pixels do not survive the opening."""
        prob = np.zeros((1, 9, 9), dtype=np.float32)
        prob[0, 4, 4] = 1.0
        prob[0, 1, 7] = 1.0

        assert DetectionPostProcessor()(TensorBuffer.from_array(prob)) == []

    def test_two_regions(self):
        prob = np.zeros((1, 20, 40), dtype=np.float32)
        prob[0, 2:8, 2:15] = 0.8
        prob[0, 12:18, 20:38] = 0.7

        boxes, scores = DetectionPostProcessor().boxes_from_bitmap(prob[0])

        assert len(boxes) == 2
        assert sorted(scores) == pytest.approx([0.7, 0.8])
        for box in boxes:
            assert (box >= 0).all() and (box <= 1).all()

    def test_score_mask_left_clean(self):
        prob = square_map()[0]
        mask = np.zeros_like(prob, dtype=np.uint8)
        contour = np.array([[[0, 0]], [[0, 2]], [[2, 2]], [[2, 0]]], dtype=np.int32)

        score = DetectionPostProcessor.box_score(prob, contour, (0, 0, 3, 3), mask)

        assert score == pytest.approx(0.9)
        assert not mask.any()

    @pytest.mark.parametrize("width,height", [(2, 2), (10, 3), (100, 20)])
    def test_unclip_grows_box(self, width, height):
        new_width, new_height = DetectionPostProcessor.unclip_size(width, height)

        assert new_width > width
        assert new_height > height

    def test_unclip_size_value(self):
        # area 9, perimeter term 10, expand 2.7
        assert DetectionPostProcessor.unclip_size(2, 2) == (5, 5)


class TestNormalizeRotatedRect:
    def test_vertical_angle_swaps_sides(self):
        center, size, angle = normalize_rotated_rect(((5, 5), (10, 4), 90.0))

        assert size == (4, 10)
        assert angle == pytest.approx(0.0)

    def test_small_angle_untouched(self):
        assert normalize_rotated_rect(((5, 5), (10, 4), 10.0))[2] == pytest.approx(10.0)

    def test_negative_angle(self):
        _, size, angle = normalize_rotated_rect(((5, 5), (10, 4), -30.0))

        assert size == (10, 4)
        assert angle == pytest.approx(-30.0)


class TestCTCLabelDecoder:
    """Tests for CTC decoding (blank is the last label)."""

    def decode(self, indices, one_hot):
        decoder = CTCLabelDecoder(Vocabulary("ab"))
        return decoder(TensorBuffer.from_array(one_hot(indices, decoder.label_dimension)))

    def test_collapses_repeats(self, one_hot):
        assert self.decode([0, 0, 2, 1, 1], one_hot) == "ab"

    def test_blank_separates_repeats(self, one_hot):
        assert self.decode([0, 2, 0], one_hot) == "aa"

    def test_all_blank(self, one_hot):
        assert self.decode([2, 2, 2], one_hot) == ""

    def test_shape_mismatch(self, one_hot):
        decoder = CTCLabelDecoder(Vocabulary("ab"))

        with pytest.raises(ValueError):
            decoder(TensorBuffer.from_array(one_hot([0, 1], 4)))


class TestEOSLabelDecoder:
    """Tests for end-of-string decoding."""

    def test_stops_at_eos(self, one_hot):
        decoder = EOSLabelDecoder(Vocabulary("ab"))

        result = decoder(TensorBuffer.from_array(one_hot([0, 1, 2, 0], 3)))

        assert result == "ab"

    def test_skips_additional_tokens(self, one_hot):
        decoder = EOSLabelDecoder(Vocabulary("ab"), additional_tokens=1)

        result = decoder(TensorBuffer.from_array(one_hot([3, 0, 0, 3, 1, 2, 0], 4)))

        assert decoder.label_dimension == 4
        assert result == "aab"


class TestOrientationMapper:
    def test_argmax_per_row(self):
        preds = np.array([
            [0.9, 0.0, 0.1, 0.0],
            [0.0, 0.2, 0.1, 0.7],
            [0.1, 0.6, 0.2, 0.1],
        ])

        assert OrientationMapper()(preds) == [
            TextOrientation.HORIZONTAL,
            TextOrientation.ROTATED_270,
            TextOrientation.ROTATED_90,
        ]

    def test_map_out_of_bounds(self):
        with pytest.raises(IndexError, match="Index out of bounds: 4."):
            OrientationMapper().map(4)
