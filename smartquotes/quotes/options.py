"""
Options for rewriting quotation marks

There are two options, both taking one of "all", "character", "named" or "numeric":
- inputFormat: which representations of straight quotes we look for (default: character)
- outputFormat: how the curly quotes get written (default: all = same encoding as the quote we replace)

Options can be given as a single string (setting both values), as a dictionary or read from config.ini
"""
from configparser import ConfigParser
import logging
from typing import Any, Dict, Final, FrozenSet, List, Optional

from smartquotes.quotes.mappings import Encoding

FORMAT_ALL: Final[str] = "all"
VALID_FORMATS: Final[List[str]] = [FORMAT_ALL] + [encoding.value for encoding in Encoding]
DEFAULT_OPTIONS: Final[Dict[str, str]] = {
    "inputFormat": Encoding.CHARACTER.value,
    "outputFormat": FORMAT_ALL,
}
CONFIG_SECTION: Final[str] = "smartquotes"

# Alternative spelling of option names (as used in config.ini)
_OPTION_ALIASES: Final[Dict[str, str]] = {
    "input_format": "inputFormat",
    "output_format": "outputFormat",
}


class ConfigurationError(ValueError):
    """Invalid inputFormat / outputFormat"""


class QuoteOptions:
    """
    Validated configuration of a rewriter. Read-only after creation.

    output_encoding is None if outputFormat is "all": then every replacement keeps the encoding
    of the quote it replaces.
    """
    __slots__ = ["input_format", "output_format", "input_encodings", "output_encoding"]

    def __init__(self, input_format: str = DEFAULT_OPTIONS["inputFormat"],
                 output_format: str = DEFAULT_OPTIONS["outputFormat"]):
        for name, value in [("inputFormat", input_format), ("outputFormat", output_format)]:
            if value not in VALID_FORMATS:
                raise ConfigurationError(f"Invalid {name} {value!r}. Must be one of: {', '.join(VALID_FORMATS)}")
        self.input_format: Final[str] = input_format
        self.output_format: Final[str] = output_format
        self.input_encodings: Final[FrozenSet[Encoding]] = frozenset(Encoding) if input_format == FORMAT_ALL \
            else frozenset([Encoding(input_format)])
        self.output_encoding: Final[Optional[Encoding]] = None if output_format == FORMAT_ALL \
            else Encoding(output_format)

    def resolve_output(self, source_encoding: Encoding) -> Encoding:
        """Which encoding should the replacement for a quote written in source_encoding have?"""
        if self.output_encoding is None:
            return source_encoding
        return self.output_encoding

    @classmethod
    def from_options(cls, options: Any = None) -> "QuoteOptions":
        """
        Create options from what a caller gives us, merged over DEFAULT_OPTIONS

        Args:
            options: None for the defaults, a string to set inputFormat and outputFormat at once
                     or a dictionary with inputFormat and/or outputFormat

        Raises:
            ConfigurationError if options have an invalid type or value
        """
        if options is None:
            return cls()
        if isinstance(options, str):
            return cls(options, options)
        if not isinstance(options, dict):
            raise ConfigurationError(f"Options must be a string or a dictionary, not {type(options).__name__}")

        merged: Dict[str, str] = dict(DEFAULT_OPTIONS)
        for key, value in options.items():
            key = _OPTION_ALIASES.get(key, key)
            if key not in DEFAULT_OPTIONS:
                logger = logging.getLogger(__name__)
                logger.warning(f"Ignoring unknown option {key!r}")
                continue
            if value is not None:
                merged[key] = value
        return cls(merged["inputFormat"], merged["outputFormat"])

    @classmethod
    def from_config(cls, config: ConfigParser, section: str = CONFIG_SECTION) -> "QuoteOptions":
        """Read input_format and output_format from the given section of config.ini (missing values: defaults)"""
        options: Dict[str, str] = {}
        if config.has_section(section):
            for name in _OPTION_ALIASES:
                if config.has_option(section, name):
                    options[name] = config.get(section, name).strip()
        return cls.from_options(options)

    def __eq__(self, other) -> bool:
        if not isinstance(other, QuoteOptions):
            return NotImplemented
        return (self.input_format, self.output_format) == (other.input_format, other.output_format)

    def __hash__(self):
        return hash((self.input_format, self.output_format))

    def __str__(self):
        return f"inputFormat={self.input_format}, outputFormat={self.output_format}"
