"""Character vocabularies used to decode recognition model outputs."""


class Vocabulary:
    """Ordered set of characters mapped by label index."""

    def __init__(self, lookup: str):
        """Create a vocabulary.

        Args:
            lookup: Characters in label order

        Raises:
            ValueError: If a character lies outside the Basic Multilingual Plane
        """
        for char in lookup:
            if ord(char) > 0xFFFF:
                raise ValueError(
                    "Look-up string contains code points, which are encoded with 2 code units"
                )
        self._lookup = lookup

    @classmethod
    def concat(cls, *vocabularies: "Vocabulary") -> "Vocabulary":
        return cls("".join(vocabulary.lookup for vocabulary in vocabularies))

    @property
    def lookup(self) -> str:
        return self._lookup

    def map(self, index: int) -> str:
        """Return the character for a label index."""
        if index < 0 or index >= len(self._lookup):
            raise IndexError(f"Vocabulary index out of range: {index}")
        return self._lookup[index]

    def __len__(self) -> int:
        return len(self._lookup)

    def __eq__(self, other):
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self._lookup == other._lookup

    def __hash__(self):
        return hash(self._lookup)

    def __str__(self):
        return self._lookup

    def __repr__(self):
        return f"Vocabulary({self._lookup!r})"


ASCII_LOWERCASE = Vocabulary("abcdefghijklmnopqrstuvwxyz")
ASCII_UPPERCASE = Vocabulary("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
ASCII_LETTERS = Vocabulary.concat(ASCII_LOWERCASE, ASCII_UPPERCASE)
DIGITS = Vocabulary("0123456789")
PUNCTUATION = Vocabulary("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")
CURRENCY = Vocabulary("£€¥¢฿")

LATIN = Vocabulary.concat(DIGITS, ASCII_LETTERS, PUNCTUATION)
ENGLISH = Vocabulary.concat(LATIN, Vocabulary("°"), CURRENCY)
# Older French alphabet used by the crnn_vgg16 weights (no Ê, ü, Ü)
LEGACY_FRENCH = Vocabulary.concat(
    LATIN, Vocabulary("°àâéèêëîïôùûçÀÂÉÈËÎÏÔÙÛÇ"), CURRENCY
)
FRENCH = Vocabulary.concat(ENGLISH, Vocabulary("àâéèêëîïôùûüçÀÂÉÈÊËÎÏÔÙÛÜÇ"))
