"""
Replace straight quotes and apostrophes with curly quotes

We look for all straight quotes (in the representations selected by inputFormat) in one pass
and decide for each of them whether to use the opening or the closing curly quote. For this we don't
count quotes from left to right but look at what we already wrote: If the last opening curly quote
of the same family comes after the last closing one, a quotation is currently open and we close it.

This only works well for quotations that are not nested and properly alternate. For malformed input
the result may be surprising but we don't try to be smarter than that.

It's not possible to determine whether a single quote is part of a quotation or used as an apostrophe.
So we correct a single quote only if it's the only one in the text. As soon as there is more than one,
all single quotes are left untouched (and a warning is logged). Double quotes are always corrected.

A lone single quote is treated as an apostrophe, so it becomes a closing curly quote (Jane’s).
"""
import logging
import re
from typing import Any, Final, FrozenSet, Iterable, List, Optional, Pattern, Tuple

from smartquotes.document.spans import Span
from smartquotes.quotes.mappings import ENTITY_MAPPINGS, FAMILIES, MAPPINGS, Encoding, QuoteFamily, \
                                        representation, requirements
from smartquotes.quotes.options import QuoteOptions

MESSAGE: Final[str] = "Strings must use curly quotes."

# Entity references start with this character
ENTITY_SENTINEL: Final[str] = "&"

logger = logging.getLogger(__name__)


class QuoteMatch:
    """One straight quote found in a text"""
    __slots__ = ["start", "token", "family"]

    def __init__(self, start: int, token: str, family: QuoteFamily):
        self.start: Final[int] = start
        self.token: Final[str] = token
        self.family: Final[QuoteFamily] = family

    def __str__(self):
        return f"{self.family.value} quote {self.token} at {self.start}"


class RewriteResult:
    """Result of rewriting one text. This data structure is meant to be read-only after creation.

    skipped counts the single quotes we left untouched because we couldn't tell apostrophes and quotation marks apart
    """
    __slots__ = ["changed", "text", "skipped"]

    def __init__(self, changed: bool, text: Any, skipped: int = 0):
        self.changed: Final[bool] = changed
        self.text: Final[Any] = text
        self.skipped: Final[int] = skipped

    def __str__(self):
        return f"changed={self.changed}, skipped={self.skipped}: {self.text}"


def build_pattern(encodings: Iterable[Encoding]) -> Pattern:
    """
    Build one regular expression matching every straight quote in the given encodings

    Alternatives are ordered like the Encoding enum (character, named, numeric) so that the
    result doesn't depend on the order of encodings.
    """
    selected: FrozenSet[Encoding] = frozenset(encodings)
    alternatives: List[str] = []
    for encoding in Encoding:
        if encoding in selected:
            alternatives.extend(f"({re.escape(value)})" for value in ENTITY_MAPPINGS[encoding])
    assert len(alternatives) > 0
    return re.compile("|".join(alternatives))


def family_of(value: str) -> Optional[QuoteFamily]:
    """Is the value a form of a single quote or a double quote? None if it's neither"""
    for family, concept in FAMILIES.items():
        if value in MAPPINGS[concept].values():
            return family
    return None


def classify(token: str, char: str) -> Tuple[str, Encoding]:
    """
    Get the encoding of a matched token, or default to the character

    Args:
        token: What our pattern matched
        char: The character at the position of the match (used for fallback)

    Returns:
        The valid value together with its encoding
    """
    if token.startswith(ENTITY_SENTINEL):
        if token in ENTITY_MAPPINGS[Encoding.NUMERIC]:
            return (token, Encoding.NUMERIC)
        if token in ENTITY_MAPPINGS[Encoding.NAMED]:
            return (token, Encoding.NAMED)
    return (char, Encoding.CHARACTER)


class QuoteRewriter:
    """Rewrites straight quotes into curly quotes. Holds no state besides its options, so it can be shared."""

    def __init__(self, options: Optional[QuoteOptions] = None):
        if options is None:
            options = QuoteOptions()
        self.options: Final[QuoteOptions] = options
        self._pattern: Final[Pattern] = build_pattern(options.input_encodings)
        # All single quote representations we're looking for
        self._single_quotes: Final[FrozenSet[str]] = frozenset(
            ENTITY_MAPPINGS[encoding][0] for encoding in options.input_encodings)

    def find_matches(self, text: str) -> List[QuoteMatch]:
        """Find all straight quotes in text (ordered, not overlapping)"""
        matches: List[QuoteMatch] = []
        for match in re.finditer(self._pattern, text):
            family = family_of(match.group())
            assert family is not None
            matches.append(QuoteMatch(match.start(), match.group(), family))
        return matches

    def has_ambiguous_apostrophes(self, matches: List[QuoteMatch]) -> bool:
        """Are there so many single quotes that we can't say whether they're apostrophes or quotation marks?"""
        count = len([match for match in matches if match.token in self._single_quotes])
        return count > 1

    def select_replacement(self, value: str, encoding: Encoding, fixed: str) -> str:
        """
        Decide which curly quote should replace value.

        Args:
            value: The straight quote (as returned by classify())
            encoding: The encoding value is written in
            fixed: Everything we've written so far
        Returns:
            The opening or closing curly quote in the output encoding
        """
        family = family_of(value)
        assert family is not None
        output_encoding = self.options.resolve_output(encoding)
        left_concept, right_concept = requirements(family)
        left = representation(left_concept, output_encoding)
        right = representation(right_concept, output_encoding)

        if fixed.rfind(left) > fixed.rfind(right):
            return right            # a quotation is open: close it
        if family == QuoteFamily.SINGLE:
            return right            # apostrophe
        return left

    def rewrite(self, text: Any) -> RewriteResult:
        """
        Replace all straight quotes in text that can be safely replaced.

        Returns:
            RewriteResult with the rewritten text if anything was replaced,
            otherwise with the original text (also if text is not a string)
        """
        if not isinstance(text, str):
            return RewriteResult(False, text)
        matches = self.find_matches(text)
        if len(matches) == 0:
            return RewriteResult(False, text)
        ignore_single_quotes = self.has_ambiguous_apostrophes(matches)

        fixed: str = ""
        pos: int = 0
        skipped: int = 0
        for match in matches:
            fixed += text[pos:match.start]
            pos = match.start
            value, encoding = classify(match.token, text[pos])
            if ignore_single_quotes and match.family == QuoteFamily.SINGLE:
                # Leave the character untouched and go on
                fixed += text[pos]
                pos += 1
                skipped += 1
                continue
            fixed += self.select_replacement(value, encoding, fixed)
            pos += len(value)
        fixed += text[pos:]

        if skipped > 0:
            logger.warning(f"Found {skipped} single quotes, can't tell apostrophes from quotation marks. "
                           f"Please correct manually: {text}")
        if skipped == len(matches):
            return RewriteResult(False, text, skipped)
        return RewriteResult(True, fixed, skipped)

    def rewrite_span(self, span: Span) -> RewriteResult:
        """
        Rewrite a span. For delimited literals only the interior gets rewritten
        and the original delimiters are put around the result.

        Returns:
            RewriteResult with the new raw content of the span
        """
        if span.is_markup() or not isinstance(span.value, str):
            return RewriteResult(False, span.raw)
        result = self.rewrite(span.value)
        if not result.changed:
            return RewriteResult(False, span.raw, result.skipped)
        return RewriteResult(True, span.wrap(result.text), result.skipped)


def rewrite(text: Any, options: Any = None) -> RewriteResult:
    """
    Shorthand for rewriting one text

    Args:
        options: QuoteOptions or anything QuoteOptions.from_options() accepts
    Raises:
        ConfigurationError on invalid options (before looking at text)
    """
    if not isinstance(options, QuoteOptions):
        options = QuoteOptions.from_options(options)
    return QuoteRewriter(options).rewrite(text)
