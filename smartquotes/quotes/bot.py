from configparser import ConfigParser
import logging
from logging.handlers import QueueHandler
from queue import SimpleQueue
from typing import Final, List, Optional

from smartquotes.document.source_document import SourceDocument
from smartquotes.document.spans import Syntax, guess_syntax
from smartquotes.quotes.options import CONFIG_SECTION, QuoteOptions
from smartquotes.quotes.rewriter import MESSAGE, QuoteRewriter
from smartquotes.wikilib import WikiLib

# Targets starting with this prefix are wiki pages, everything else is a file
WIKI_PREFIX: Final[str] = "wiki:"


class SpanReport:
    """The result of checking one span that contains straight quotes

    fixed is None if we couldn't correct anything. This data structure is meant to be read-only after creation.
    """
    __slots__ = ["document", "line", "column", "message", "original", "fixed", "warnings"]

    def __init__(self, document: str, line: int, column: int, original: str, fixed: Optional[str],
                 warnings: str, message: str = MESSAGE):
        self.document: Final[str] = document
        self.line: Final[int] = line
        self.column: Final[int] = column
        self.message: Final[str] = message
        self.original: Final[str] = original
        self.fixed: Final[Optional[str]] = fixed
        self.warnings: Final[str] = warnings

    def __str__(self):
        result = f"{self.document}:{self.line}:{self.column}: {self.message}"
        if self.fixed is not None:
            result += f" {self.original} -> {self.fixed}"
        return result


class QuoteBot:
    """Main class for correcting quotation marks in files and wiki pages"""
    def __init__(self, config: ConfigParser, simulate: bool = False, syntax: Optional[Syntax] = None):
        """
        @param syntax: Use this syntax for all files instead of guessing it from the file extension
        Raises ConfigurationError on invalid input_format / output_format in config
        """
        self._config = config
        self.options: Final[QuoteOptions] = QuoteOptions.from_config(config)
        self.rewriter: Final[QuoteRewriter] = QuoteRewriter(self.options)
        self.logger: logging.Logger = logging.getLogger("smartquotes.bot")
        self.logger.debug(f"Using options {self.options}")
        self._simulate: bool = simulate
        self._syntax: Optional[Syntax] = syntax
        self._wikilib: Optional[WikiLib] = None
        self._reset()

    def _reset(self):
        self._report_counter: int = 0
        self._correction_counter: int = 0
        self._warning_counter: int = 0
        self._saved_counter: int = 0
        self._correction_diff: str = ""
        self._warnings: str = ""

    def _get_wikilib(self) -> WikiLib:
        """Connect to the wiki configured in config.ini (only when we need it)"""
        if self._wikilib is None:
            if not self._config.has_option(CONFIG_SECTION, 'site'):
                raise RuntimeError("Missing site setting for smartquotes in config.ini")
            self._wikilib = WikiLib(self._config.get(CONFIG_SECTION, 'site'),
                                    self._config.get(CONFIG_SECTION, 'scriptpath', fallback="/mediawiki"))
        return self._wikilib

    def load_file(self, path: str) -> Optional[SourceDocument]:
        """
        Returns None if we don't know the syntax of the file (see EXTENSIONS in smartquotes.document.spans)
        Raises RuntimeError if the file can't be read
        """
        syntax = self._syntax if self._syntax is not None else guess_syntax(path)
        if syntax is None:
            self.logger.warning(f"Skipping {path}: unknown file type. Use --syntax to check it anyway.")
            return None
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise RuntimeError(f"Couldn't read {path}: {e}")
        return SourceDocument(path, content, syntax)

    def load_page(self, page: str) -> SourceDocument:
        """Raises WikiError (a RuntimeError) if the page can't be retrieved"""
        content = self._get_wikilib().get_page_source(page)
        return SourceDocument(f"{WIKI_PREFIX}{page}", content, Syntax.TEXT)

    def check_document(self, document: SourceDocument) -> List[SpanReport]:
        """
        Check all spans of a document and correct them.

        Every span with at least one straight quote gets a report. Corrections are directly
        applied to the document (nothing is saved). Statistics can be read afterwards with
        get_report_counter(), get_correction_counter(), get_warning_counter(),
        get_correction_stats(), get_correction_diff() and get_warnings()

        Returns:
            SpanReport for each span containing straight quotes
        """
        # Catch any warning coming from the rewriter in a simple queue
        rewriter_logger = logging.getLogger("smartquotes.quotes.rewriter")
        propagate = rewriter_logger.propagate
        rewriter_logger.propagate = False
        log_queue: SimpleQueue = SimpleQueue()
        log_handler = QueueHandler(log_queue)
        rewriter_logger.addHandler(log_handler)

        reports: List[SpanReport] = []
        try:
            for span in document:
                if not isinstance(span.value, str) or len(self.rewriter.find_matches(span.value)) == 0:
                    continue
                result = self.rewriter.rewrite_span(span)
                messages: List[str] = []
                while not log_queue.empty():
                    record: logging.LogRecord = log_queue.get()
                    messages.append(record.getMessage())
                warnings: str = "\n".join(messages)
                line, column = document.line_and_column(span.start)
                report = SpanReport(document.name, line, column, span.raw,
                                    result.text if result.changed else None, warnings)
                if result.changed:
                    span.raw = result.text
                    self._correction_counter += 1
                if warnings != "":
                    self.logger.warning(f"{document.name}:{line}:{column}: {warnings}")
                    self._warning_counter += len(messages)
                    self._warnings += f"{document.name}:{line}:{column}: {warnings}\n"
                reports.append(report)
        finally:
            rewriter_logger.removeHandler(log_handler)
            rewriter_logger.propagate = propagate

        self._report_counter += len(reports)
        if any(report.fixed is not None for report in reports):
            document.sync_from_spans()
            self._correction_diff += f"{document.name}: {document.get_diff()}\n"
        return reports

    def save_file(self, document: SourceDocument) -> bool:
        """
        Write corrections of a document back to its file

        Returns:
            bool: Did we save anything?
        """
        if not document.has_changes():
            return False
        if document.name.startswith(WIKI_PREFIX):
            self.logger.warning(f"Can't save corrections of {document.name}. Please apply them manually.")
            return False
        with open(document.name, "w", encoding="utf-8", newline="") as f:
            f.write(document.get_content())
        self.logger.info(f"Saved corrections to {document.name}")
        self._saved_counter += 1
        return True

    def get_correction_stats(self) -> str:
        """Return a summary of the last run"""
        stats: str = f"{self._report_counter} spans with straight quotes, {self._correction_counter} corrections"
        if not self._simulate:
            stats += f", {self._saved_counter} files saved"
        return stats

    def get_warnings(self) -> str:
        warnings: str = f"{self._warning_counter} warnings"
        if self._warning_counter > 0:
            warnings += ":\n" + self._warnings
        return warnings

    def get_report_counter(self) -> int:
        """How many spans with straight quotes did we find (in the last run)?"""
        return self._report_counter

    def get_correction_counter(self) -> int:
        """How many spans did we correct (in the last run)?"""
        return self._correction_counter

    def get_warning_counter(self) -> int:
        """How many warnings did we get (in the last run)?"""
        return self._warning_counter

    def get_correction_diff(self) -> str:
        """Print a diff of the corrections (made in the last run)"""
        return self._correction_diff

    def run(self, targets: List[str]) -> int:
        """
        Correct all given files and wiki pages (names starting with "wiki:")

        Returns:
            Number of spans with straight quotes found
        """
        self._reset()
        for target in targets:
            try:
                if target.startswith(WIKI_PREFIX):
                    document = self.load_page(target[len(WIKI_PREFIX):])
                else:
                    document = self.load_file(target)
                    if document is None:
                        continue
                reports = self.check_document(document)
            except RuntimeError as e:
                print(f"Error while trying to correct {target}: {e}")
                continue
            for report in reports:
                print(report)
            if not self._simulate:
                self.save_file(document)

        if self._simulate and self._correction_counter > 0:
            print("We're running with --simulate. No corrections are written back.")
        print(self.get_correction_stats())
        if self._correction_counter > 0:
            print(self.get_correction_diff())
        print(self.get_warnings())
        return self._report_counter
