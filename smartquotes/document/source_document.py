from bisect import bisect_right
import difflib
import logging
from typing import Final, Iterator, List, Optional, Tuple

from smartquotes.document.spans import Span, Syntax, split_into_spans


class SourceDocument:
    """
    Represents one text (content of a file or a wiki page) that we want to correct.

    Can be split up into spans. You can make changes either with set_content() or by changing the raw content
    of a span and syncing it back here with sync_from_spans().
    There is no real persistence, so if you want to permanently store the changes
    you need to take care of that yourself.
    """
    # Font color for terminal output in diffs
    RED: Final[str] = "\033[0;31m"
    GREEN: Final[str] = "\033[0;32m"
    NO_COLOR: Final[str] = "\033[0m"

    def __init__(self, name: str, content: str, syntax: Syntax = Syntax.TEXT):
        """
        @param name: Where the content comes from (file name or wiki page)
        @param syntax: Decides how the content gets split into spans
        """
        assert isinstance(name, str) and isinstance(content, str)
        self.name: Final[str] = name
        self.syntax: Final[Syntax] = syntax
        self._content: str = content
        self._original_content: Final[str] = content
        self._spans: Optional[List[Span]] = None
        self._line_starts: Optional[List[int]] = None
        self.logger = logging.getLogger('smartquotes.document')

    def get_content(self) -> str:
        return self._content

    def get_original_content(self) -> str:
        """Return the original content this SourceDocument was constructed with"""
        return self._original_content

    def set_content(self, text: str):
        """Changes the content of this document. Caution: Changes in spans will be discarded."""
        self._content = text
        self._spans = None

    def get_spans(self) -> List[Span]:
        """Split into spans if that hasn't happened yet"""
        if self._spans is None:
            self._spans = split_into_spans(self._content, self.syntax)
            self.logger.debug(f"Split {self.name} into {len(self._spans)} spans")
        return self._spans

    def sync_from_spans(self):
        """In case changes were made to spans, save all changes to the document."""
        if self._spans is None:
            self.logger.warning("Attempting to sync from non-existing spans. Ignoring.")
            return
        self._content = "".join([span.raw for span in self._spans])

    def has_changes(self) -> bool:
        """
        Have there any changes been made to this document?

        If you made changes to spans, make sure you first call sync_from_spans()!
        """
        return self._content != self._original_content

    def get_diff(self) -> str:
        """
        Returns a diff between original content and current content.
        If you made changes to spans, make sure you first call sync_from_spans()!
        """
        diff: str = ""
        if self.has_changes():
            seq_mat = difflib.SequenceMatcher(a=self._original_content, b=self._content, autojunk=False)
            for operation, a_start, a_end, b_start, b_end in seq_mat.get_opcodes():
                if operation == "delete":
                    diff += self.RED + "{" + self._original_content[a_start:a_end] + "}" + self.NO_COLOR
                elif operation == "replace":
                    diff += self.RED + "{" + self._original_content[a_start:a_end] + ","
                    diff += self.GREEN + self._content[b_start:b_end] + "}" + self.NO_COLOR
                elif operation == "insert":
                    diff += self.GREEN + "{" + self._content[b_start:b_end] + "}" + self.NO_COLOR
                elif operation == "equal":
                    diff += self._content[b_start:b_end]
        return diff

    def line_and_column(self, offset: int) -> Tuple[int, int]:
        """Convert an offset in the original content into line and column (both starting with 1)"""
        if self._line_starts is None:
            self._line_starts = [0]
            for pos, character in enumerate(self._original_content):
                if character == "\n":
                    self._line_starts.append(pos + 1)
        line = bisect_right(self._line_starts, offset) - 1
        return (line + 1, offset - self._line_starts[line] + 1)

    def __iter__(self) -> Iterator[Span]:
        """Iterate over all spans that are candidates for rewriting (leaving out markup)"""
        return (span for span in self.get_spans() if not span.is_markup())

    def __str__(self) -> str:
        content = f"{self.name} ({self.syntax.value}). Spans:\n"
        for span in self.get_spans():
            content += f"- {span}\n"
        return content
