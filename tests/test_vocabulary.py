"""Tests for recognition vocabularies."""

import pytest

from page_ocr.libs.onnx_ocr.vocabulary import (
    DIGITS,
    ENGLISH,
    FRENCH,
    LATIN,
    LEGACY_FRENCH,
    Vocabulary,
)


class TestVocabulary:
    """Tests for Vocabulary."""

    def test_map(self):
        """Label indices map to characters in order."""
        vocabulary = Vocabulary("xyz")

        assert len(vocabulary) == 3
        assert vocabulary.map(0) == "x"
        assert vocabulary.map(2) == "z"

    def test_map_out_of_range(self):
        """Invalid indices raise IndexError."""
        with pytest.raises(IndexError):
            Vocabulary("xyz").map(3)
        with pytest.raises(IndexError):
            Vocabulary("xyz").map(-1)

    def test_rejects_astral_characters(self):
        """Characters outside the BMP are rejected."""
        with pytest.raises(ValueError, match="2 code units"):
            Vocabulary("a\U0001F600")

    def test_concat(self):
        """Concatenation preserves order."""
        assert Vocabulary.concat(Vocabulary("ab"), Vocabulary("c")) == Vocabulary("abc")

    def test_equality_and_hash(self):
        """Vocabularies compare by their characters."""
        assert Vocabulary("ab") == Vocabulary("ab")
        assert Vocabulary("ab") != Vocabulary("ba")
        assert len({Vocabulary("ab"), Vocabulary("ab")}) == 1
        assert str(Vocabulary("ab")) == "ab"


class TestPredefinedVocabularies:
    """Tests for the bundled alphabets."""

    def test_sizes(self):
        assert len(DIGITS) == 10
        assert len(LATIN) == 94
        assert len(ENGLISH) == 100
        assert len(FRENCH) == 126

    def test_latin_order(self):
        """Digits come first, then letters, then punctuation."""
        assert LATIN.lookup.startswith("0123456789abc")
        assert LATIN.lookup.endswith("{|}~")

    def test_legacy_french_lacks_newer_letters(self):
        """The older alphabet has no Ê, ü or Ü."""
        for char in "ÊüÜ":
            assert char in FRENCH.lookup
            assert char not in LEGACY_FRENCH.lookup
        assert "é" in LEGACY_FRENCH.lookup
