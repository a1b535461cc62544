"""
Splitting source text into spans

A span is the unit the quote rewriter works on. Every text gets split into a complete, ordered
list of spans so that joining the raw content of all spans gives back the text:
- LITERAL: a delimited literal (string literal in code or quoted attribute value in markup).
  The delimiters are part of the raw content but never get rewritten
- TEXT: a free text run (paragraph of plain text or text between markup tags)
- MARKUP: everything else (tags, code, comments, whitespace). Never rewritten

How a text is split depends on its syntax:
- TEXT: paragraphs separated by blank lines
- MARKUP: HTML / XML
- SCRIPT: JavaScript / TypeScript / JSON / CSS source code
- PYTHON: Python source code
- JSX: JavaScript / TypeScript code with embedded JSX elements
"""
from enum import Enum
from os.path import splitext
import re
from typing import Any, Dict, Final, Iterator, List, Optional, Pattern


class SpanKind(Enum):
    LITERAL = "Literal"
    TEXT = "Text"
    MARKUP = "Markup"


class Syntax(Enum):
    TEXT = "text"
    MARKUP = "markup"
    SCRIPT = "script"
    PYTHON = "python"
    JSX = "jsx"


# File extensions (lower case) we know the syntax of. Other files are skipped
EXTENSIONS: Final = {
    ".txt": Syntax.TEXT, ".text": Syntax.TEXT, ".md": Syntax.TEXT, ".markdown": Syntax.TEXT,
    ".rst": Syntax.TEXT,
    ".html": Syntax.MARKUP, ".htm": Syntax.MARKUP, ".xhtml": Syntax.MARKUP, ".xml": Syntax.MARKUP,
    ".svg": Syntax.MARKUP, ".vue": Syntax.MARKUP,
    ".js": Syntax.SCRIPT, ".mjs": Syntax.SCRIPT, ".cjs": Syntax.SCRIPT, ".ts": Syntax.SCRIPT,
    ".mts": Syntax.SCRIPT, ".cts": Syntax.SCRIPT, ".json": Syntax.SCRIPT, ".css": Syntax.SCRIPT,
    ".scss": Syntax.SCRIPT, ".less": Syntax.SCRIPT,
    ".py": Syntax.PYTHON, ".pyi": Syntax.PYTHON,
    ".jsx": Syntax.JSX, ".tsx": Syntax.JSX,
}

# Blank lines between paragraphs
_PARAGRAPH_SEPARATOR: Final[Pattern] = re.compile(r"\n[ \t]*\n\s*")

# Comments, <script>/<style> elements, tags and {template expressions}
_MARKUP_PATTERN: Final[Pattern] = re.compile(
    r"<!--.*?-->"
    r"|<(script|style)\b(?:\"[^\"]*\"|'[^']*'|[^'\">])*>.*?</\1\s*>"
    r"|<(?:[/!?]?[A-Za-z](?:\"[^\"]*\"|'[^']*'|[^'\">])*|/?)>"
    r"|\{[^{}]*\}",
    flags=re.DOTALL | re.IGNORECASE)

# Quoted attribute value inside a tag: group 1 is the value including its delimiters
_ATTRIBUTE_VALUE: Final[Pattern] = re.compile(r"=\s*(\"[^\"]*\"|'[^']*')")

# Comments and template literals (both are skipped) or string literals (group 1)
_SCRIPT_PATTERN: Final[Pattern] = re.compile(
    r"//[^\n]*|/\*.*?\*/|`(?:[^`\\]|\\.)*`"
    r"|('(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\")",
    flags=re.DOTALL)

# Comments and triple-quoted strings (docstrings, both are skipped) or string literals (group 1)
_PYTHON_PATTERN: Final[Pattern] = re.compile(
    r"#[^\n]*|\"\"\"(?:[^\\]|\\.)*?\"\"\"|'''(?:[^\\]|\\.)*?'''"
    r"|('(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\")",
    flags=re.DOTALL)

# Tokens in JavaScript code around JSX elements: comments and template literals (skipped),
# string literals, braces and a < that may open a JSX element (not a comparison or a generic <T,>)
_JSX_CODE_TOKEN: Final[Pattern] = re.compile(
    r"//[^\n]*|/\*.*?\*/|`(?:[^`\\]|\\.)*`"
    r"|(?P<string>'(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\")"
    r"|(?P<brace>[{}])"
    r"|(?P<tag><(?:>|[A-Za-z_$][\w$.:-]*(?=[\s/>{])(?!\s+extends\b)))",
    flags=re.DOTALL)

# Tokens inside a JSX tag: attribute strings (no escape sequences in JSX), {expressions}, end of tag
_JSX_TAG_TOKEN: Final[Pattern] = re.compile(r"(?P<string>\"[^\"]*\"|'[^']*')|(?P<brace>\{)|(?P<end>/?>)")

# Inside a JSX element everything is text until the next tag or {expression}
_JSX_CHILD_TOKEN: Final[Pattern] = re.compile(r"[<{]")

# Characters that can come directly before a JSX element in JavaScript code
_JSX_PRECEDING: Final[str] = "(=,[{?:&|>;"

# Escape sequence (group 1: the escaped character) or an unescaped quote character (group 2)
_ESCAPE_OR_QUOTE: Final[Pattern] = re.compile(r"\\(.)|(['\"])", flags=re.DOTALL)


class Span:
    """
    A contiguous region of a text that gets rewritten as one unit

    raw can be directly changed - use SourceDocument.sync_from_spans() to save it in the
    corresponding SourceDocument. start is the offset of the span in the original text.
    If escaped is True, the span is a string literal in code where quote characters
    can be written with a backslash inside the literal.
    """
    __slots__ = ["kind", "start", "raw", "escaped", "_value"]

    def __init__(self, kind: SpanKind, start: int, raw: str, escaped: bool = False, value: Any = None):
        """
        @param value: The value of the span if it is not simply its content
                      (e.g. a host may hand over a number literal). Default: derive from raw
        """
        self.kind: Final[SpanKind] = kind
        self.start: Final[int] = start
        self.raw: str = raw
        self.escaped: Final[bool] = escaped
        self._value: Any = value

    def is_literal(self) -> bool:
        return self.kind == SpanKind.LITERAL

    def is_markup(self) -> bool:
        return self.kind == SpanKind.MARKUP

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    @property
    def value(self) -> Any:
        """The content the rewriter should work on: the interior of literals, the raw content otherwise"""
        if self._value is not None:
            return self._value
        if not self.is_literal():
            return self.raw
        interior = self.raw[1:-1]
        if self.escaped:
            # Decode \' and \" but leave all other escape sequences untouched
            interior = _ESCAPE_OR_QUOTE.sub(
                lambda match: match.group(1) if match.group(1) in ("'", '"') else match.group(0), interior)
        return interior

    def _quote_escapes(self) -> Dict[str, Iterator[bool]]:
        """For each quote character in the interior (in order): was it written with a backslash?"""
        escapes: Dict[str, List[bool]] = {"'": [], '"': []}
        for match in _ESCAPE_OR_QUOTE.finditer(self.raw[1:-1]):
            if match.group(1) in escapes:
                escapes[match.group(1)].append(True)
            elif match.group(2) is not None:
                escapes[match.group(2)].append(False)
        return {quote: iter(flags) for quote, flags in escapes.items()}

    def wrap(self, text: str) -> str:
        """
        Put the original delimiters of a literal around text

        In escaped literals the straight quotes left in text get back the backslashes they had in raw.
        That works because the rewriter replaces either all straight quotes of a kind or none of them,
        so the remaining ones are the original ones in the original order.
        The closing delimiter is always escaped.
        """
        if not self.is_literal():
            return text
        opening, closing = self.raw[0], self.raw[-1]
        if self.escaped:
            escapes = self._quote_escapes()

            def encode(match) -> str:
                quote = match.group(2)
                if quote is None:
                    return match.group(0)
                if next(escapes[quote], quote == closing) or quote == closing:
                    return "\\" + quote
                return quote

            text = _ESCAPE_OR_QUOTE.sub(encode, text)
        return opening + text + closing

    def __str__(self):
        return f"{self.kind.name} ({self.start}, {len(self.raw)}): {self.raw}"


def guess_syntax(filename: str) -> Optional[Syntax]:
    """Which syntax does a file have? Decided by file extension, None if we don't know it"""
    return EXTENSIONS.get(splitext(filename)[1].lower())


def split_into_spans(text: str, syntax: Syntax = Syntax.TEXT) -> List[Span]:
    """Split the given text into spans (see module documentation)"""
    if syntax == Syntax.MARKUP:
        return _split_markup(text)
    if syntax == Syntax.SCRIPT:
        return _split_script(text, _SCRIPT_PATTERN)
    if syntax == Syntax.PYTHON:
        return _split_script(text, _PYTHON_PATTERN)
    if syntax == Syntax.JSX:
        return _JsxScanner(text).split()
    return _split_text(text)


def _split_text(text: str) -> List[Span]:
    spans: List[Span] = []
    last_pos = 0
    for match in re.finditer(_PARAGRAPH_SEPARATOR, text):
        if match.start() > last_pos:
            spans.append(Span(SpanKind.TEXT, last_pos, text[last_pos:match.start()]))
        spans.append(Span(SpanKind.MARKUP, match.start(), match.group()))
        last_pos = match.end()

    if last_pos < len(text):
        spans.append(Span(SpanKind.TEXT, last_pos, text[last_pos:]))
    return spans


def _text_or_whitespace(start: int, content: str) -> Span:
    """Text runs consisting only of whitespace are not interesting for us"""
    if content.strip() == "":
        return Span(SpanKind.MARKUP, start, content)
    return Span(SpanKind.TEXT, start, content)


def _split_tag(start: int, tag: str) -> List[Span]:
    """Split a tag into markup and the literals of its quoted attribute values"""
    spans: List[Span] = []
    last_pos = 0
    for match in re.finditer(_ATTRIBUTE_VALUE, tag):
        spans.append(Span(SpanKind.MARKUP, start + last_pos, tag[last_pos:match.start(1)]))
        spans.append(Span(SpanKind.LITERAL, start + match.start(1), match.group(1)))
        last_pos = match.end(1)
    spans.append(Span(SpanKind.MARKUP, start + last_pos, tag[last_pos:]))
    return spans


def _split_markup(text: str) -> List[Span]:
    spans: List[Span] = []
    last_pos = 0
    for match in re.finditer(_MARKUP_PATTERN, text):
        if match.start() > last_pos:
            spans.append(_text_or_whitespace(last_pos, text[last_pos:match.start()]))
        if match.group().startswith("<") and not match.group().startswith("<!") and match.group(1) is None:
            spans.extend(_split_tag(match.start(), match.group()))
        else:
            spans.append(Span(SpanKind.MARKUP, match.start(), match.group()))
        last_pos = match.end()

    if last_pos < len(text):
        spans.append(_text_or_whitespace(last_pos, text[last_pos:]))
    return spans


def _split_script(text: str, pattern: Pattern) -> List[Span]:
    spans: List[Span] = []
    last_pos = 0
    for match in re.finditer(pattern, text):
        if match.group(1) is None:
            continue    # comment, template literal or docstring: stays part of the surrounding markup span
        if match.start() > last_pos:
            spans.append(Span(SpanKind.MARKUP, last_pos, text[last_pos:match.start()]))
        spans.append(Span(SpanKind.LITERAL, match.start(), match.group(1), escaped=True))
        last_pos = match.end()

    if last_pos < len(text):
        spans.append(Span(SpanKind.MARKUP, last_pos, text[last_pos:]))
    return spans


class _JsxScanner:
    """
    Split JavaScript code with embedded JSX elements

    Code is markup except for its string literals. Inside JSX elements the text between tags
    is text and quoted attribute values are literals. {expressions} inside elements are code again.
    """
    def __init__(self, text: str):
        self.text: Final[str] = text
        self.spans: List[Span] = []
        self._pos: int = 0          # where we continue scanning
        self._last_pos: int = 0     # end of the last span we added

    def split(self) -> List[Span]:
        self._code(in_expression=False)
        if self._last_pos < len(self.text):
            self.spans.append(Span(SpanKind.MARKUP, self._last_pos, self.text[self._last_pos:]))
        return self.spans

    def _add(self, kind: SpanKind, start: int, end: int, escaped: bool = False):
        """Add a span (everything since the last span becomes markup)"""
        if start > self._last_pos:
            self.spans.append(Span(SpanKind.MARKUP, self._last_pos, self.text[self._last_pos:start]))
        self.spans.append(Span(kind, start, self.text[start:end], escaped))
        self._last_pos = end

    def _starts_element(self, pos: int) -> bool:
        """Can there be a JSX element at pos? Only where an expression can start"""
        i = pos - 1
        while i >= 0 and self.text[i].isspace():
            i -= 1
        if i < 0 or self.text[i] in _JSX_PRECEDING:
            return True
        if self.text.endswith("return", 0, i + 1):
            return i < 6 or not (self.text[i - 6].isalnum() or self.text[i - 6] in "_$")
        return False

    def _code(self, in_expression: bool):
        """Scan code. Inside an {expression} stop at its closing brace (without consuming it)"""
        depth = 0
        while True:
            match = _JSX_CODE_TOKEN.search(self.text, self._pos)
            if match is None:
                self._pos = len(self.text)
                return
            self._pos = match.end()
            if match.group("string") is not None:
                self._add(SpanKind.LITERAL, match.start(), match.end(), escaped=True)
            elif match.group("brace") == "{":
                depth += 1
            elif match.group("brace") == "}":
                if depth == 0 and in_expression:
                    self._pos = match.start()
                    return
                depth = max(depth - 1, 0)
            elif match.group("tag") is not None and self._starts_element(match.start()):
                self._element(match.start())

    def _expression(self, start: int):
        """Scan an {expression} starting at its opening brace"""
        self._pos = start + 1
        self._code(in_expression=True)
        if self._pos < len(self.text):
            self._pos += 1

    def _tag(self, start: int) -> bool:
        """Scan a tag starting at its <. Returns True for an opening tag (with children)"""
        closing = self.text.startswith("</", start)
        self._pos = start + 1
        while True:
            match = _JSX_TAG_TOKEN.search(self.text, self._pos)
            if match is None:
                self._pos = len(self.text)
                return False
            if match.group("string") is not None:
                self._add(SpanKind.LITERAL, match.start(), match.end())
                self._pos = match.end()
            elif match.group("brace") is not None:
                self._expression(match.start())
            else:
                self._pos = match.end()
                return not closing and match.group("end") == ">"

    def _element(self, start: int):
        """Scan a JSX element with all its children, starting at the < of its opening tag"""
        if not self._tag(start):
            return
        while self._pos < len(self.text):
            match = _JSX_CHILD_TOKEN.search(self.text, self._pos)
            end = match.start() if match is not None else len(self.text)
            if self.text[self._pos:end].strip() != "":
                self._add(SpanKind.TEXT, self._pos, end)
            if match is None:
                self._pos = len(self.text)
                return
            if match.group() == "{":
                self._expression(match.start())
            elif self.text.startswith("</", match.start()):
                self._tag(match.start())
                return
            else:
                self._element(match.start())
