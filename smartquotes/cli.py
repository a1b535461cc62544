"""
Replace straight quotes and apostrophes with curly quotes in files and wiki pages.

Example: Check which quotes in a file would be corrected (simulation: don't make changes)
    smartquotes --simulate index.html

Example: Now write the corrections to the file
    smartquotes index.html

Example: Check a wiki page (the wiki is configured in config.ini, corrections are only reported)
    smartquotes wiki:Prayer

Configuration is read from config.ini (see config.example.ini). Command-line options override it.
"""
import argparse
from configparser import ConfigParser
import logging
import sys
from typing import List, Optional

from smartquotes.document.spans import Syntax
from smartquotes.quotes.bot import QuoteBot
from smartquotes.quotes.options import CONFIG_SECTION, VALID_FORMATS, ConfigurationError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments

    Returns:
        Parsed arguments
    """
    log_levels: List[str] = ['debug', 'info', 'warning', 'error']

    parser = argparse.ArgumentParser(description="Replace straight quotes and apostrophes with curly quotes")
    parser.add_argument("targets", nargs="+", help="Files to correct or wiki pages (written as wiki:Page_name)")
    parser.add_argument("-s", "--simulate", action="store_true",
                        help="Simulates the corrections but does not write them back.")
    parser.add_argument("-l", "--loglevel", choices=log_levels, default="warning", help="set loglevel for the script")
    parser.add_argument("-c", "--config", default="config.ini", help="Path to the configuration file")
    parser.add_argument("--input-format", choices=VALID_FORMATS,
                        help="Which representations of straight quotes to look for")
    parser.add_argument("--output-format", choices=VALID_FORMATS,
                        help="How to write curly quotes (all: keep the representation of the replaced quote)")
    parser.add_argument("--syntax", choices=[syntax.value for syntax in Syntax],
                        help="Syntax of all files (default: guess from file extension, skip unknown files)")
    return parser.parse_args(argv)


def setup_logging(loglevel: str):
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    sh = logging.StreamHandler(sys.stdout)
    fformatter = logging.Formatter('%(levelname)s: %(message)s')
    sh.setFormatter(fformatter)
    numeric_level = getattr(logging, loglevel.upper(), None)
    assert isinstance(numeric_level, int)
    sh.setLevel(numeric_level)
    root.addHandler(sh)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Returns:
        Exit code: 0 on success, 1 if corrections are pending (only with --simulate), 2 on invalid configuration
    """
    args = parse_arguments(argv)
    setup_logging(args.loglevel)

    config = ConfigParser()
    config.read(args.config, encoding="utf-8")
    if not config.has_section(CONFIG_SECTION):
        config.add_section(CONFIG_SECTION)
    if args.input_format is not None:
        config.set(CONFIG_SECTION, "input_format", args.input_format)
    if args.output_format is not None:
        config.set(CONFIG_SECTION, "output_format", args.output_format)

    try:
        quotebot = QuoteBot(config, args.simulate, Syntax(args.syntax) if args.syntax is not None else None)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 2

    quotebot.run(args.targets)
    if args.simulate and quotebot.get_correction_counter() > 0:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
