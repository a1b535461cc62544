"""
Representations of all quotation marks we know about

For each quote concept (straight single/double quote and the four curly quotes) we store
how it is written in every supported encoding:
- character: the plain character itself (e.g. ’)
- named: a named character reference (e.g. &rsquo;)
- numeric: a numeric character reference (e.g. &#8217;)

The two straight quotes additionally define which pair of curly quotes should replace them.
Everything in here is read-only and shared by all rewriters.
"""
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping, Optional, Tuple


class Encoding(Enum):
    CHARACTER = "character"
    NAMED = "named"
    NUMERIC = "numeric"


class QuoteFamily(Enum):
    SINGLE = "single"
    DOUBLE = "double"


class QuoteConcept(Enum):
    SINGLE_QUOTE = "singleQuote"
    DOUBLE_QUOTE = "doubleQuote"
    CURLY_LEFT_QUOTE = "curlyLeftQuote"
    CURLY_RIGHT_QUOTE = "curlyRightQuote"
    CURLY_LEFT_DOUBLE_QUOTE = "curlyLeftDoubleQuote"
    CURLY_RIGHT_DOUBLE_QUOTE = "curlyRightDoubleQuote"


class QuoteMapping:
    """All representations of one quote concept

    requires is only set for the straight quotes: (opening concept, closing concept)
    """
    __slots__ = ["character", "named", "numeric", "requires"]

    def __init__(self, character: str, named: str, numeric: str,
                 requires: Optional[Tuple[QuoteConcept, QuoteConcept]] = None):
        self.character: Final[str] = character
        self.named: Final[str] = named
        self.numeric: Final[str] = numeric
        self.requires: Final[Optional[Tuple[QuoteConcept, QuoteConcept]]] = requires

    def get(self, encoding: Encoding) -> str:
        return getattr(self, encoding.value)

    def values(self) -> Tuple[str, str, str]:
        return (self.character, self.named, self.numeric)

    def __str__(self):
        return f"{self.character} / {self.named} / {self.numeric}"


MAPPINGS: Final[Mapping[QuoteConcept, QuoteMapping]] = MappingProxyType({
    QuoteConcept.SINGLE_QUOTE: QuoteMapping(
        "'", "&apos;", "&#39;",
        requires=(QuoteConcept.CURLY_LEFT_QUOTE, QuoteConcept.CURLY_RIGHT_QUOTE)),
    QuoteConcept.DOUBLE_QUOTE: QuoteMapping(
        '"', "&quot;", "&#34;",
        requires=(QuoteConcept.CURLY_LEFT_DOUBLE_QUOTE, QuoteConcept.CURLY_RIGHT_DOUBLE_QUOTE)),
    QuoteConcept.CURLY_LEFT_QUOTE: QuoteMapping("‘", "&lsquo;", "&#8216;"),
    QuoteConcept.CURLY_RIGHT_QUOTE: QuoteMapping("’", "&rsquo;", "&#8217;"),
    QuoteConcept.CURLY_LEFT_DOUBLE_QUOTE: QuoteMapping("“", "&ldquo;", "&#8220;"),
    QuoteConcept.CURLY_RIGHT_DOUBLE_QUOTE: QuoteMapping("”", "&rdquo;", "&#8221;"),
})

# Which straight quote concept stands for which family
FAMILIES: Final[Mapping[QuoteFamily, QuoteConcept]] = MappingProxyType({
    QuoteFamily.SINGLE: QuoteConcept.SINGLE_QUOTE,
    QuoteFamily.DOUBLE: QuoteConcept.DOUBLE_QUOTE,
})

# The straight quotes (single first, then double) as written in each encoding
ENTITY_MAPPINGS: Final[Mapping[Encoding, Tuple[str, str]]] = MappingProxyType({
    encoding: (MAPPINGS[QuoteConcept.SINGLE_QUOTE].get(encoding), MAPPINGS[QuoteConcept.DOUBLE_QUOTE].get(encoding))
    for encoding in Encoding
})


def representation(concept: QuoteConcept, encoding: Encoding) -> str:
    """Return how the quote concept is written in the given encoding"""
    return MAPPINGS[concept].get(encoding)


def requirements(family: QuoteFamily) -> Tuple[QuoteConcept, QuoteConcept]:
    """Return the curly (opening, closing) concepts that can replace a straight quote of this family"""
    requires = MAPPINGS[FAMILIES[family]].requires
    assert requires is not None
    return requires
