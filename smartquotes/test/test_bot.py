"""
Test cases for QuoteBot: checking documents, reporting, saving files and reading wiki pages
"""
from configparser import ConfigParser
from contextlib import redirect_stdout
import io
import logging
from os.path import join
from tempfile import TemporaryDirectory
import unittest
from unittest.mock import patch

from smartquotes.document.source_document import SourceDocument
from smartquotes.document.spans import Syntax, guess_syntax
from smartquotes.quotes.bot import QuoteBot, SpanReport
from smartquotes.quotes.options import ConfigurationError
from smartquotes.quotes.rewriter import MESSAGE
from smartquotes.wikilib import WikiError


def create_config(content: str = "") -> ConfigParser:
    config = ConfigParser()
    config.read_string(content)
    return config


class TestQuoteBot(unittest.TestCase):
    def setUp(self):
        self.bot = QuoteBot(create_config(), simulate=True)

    def test_options_from_config(self):
        bot = QuoteBot(create_config("[smartquotes]\ninput_format = all\noutput_format = named\n"))
        self.assertEqual(bot.options.input_format, "all")
        self.assertEqual(bot.options.output_format, "named")
        with self.assertRaises(ConfigurationError):
            QuoteBot(create_config("[smartquotes]\noutput_format = guillemets\n"))

    def test_check_literal(self):
        document = SourceDocument("test.js", "var string = 'They said \"here are smart quotes!\"';", Syntax.SCRIPT)
        reports = self.bot.check_document(document)
        self.assertEqual(len(reports), 1)
        self.assertEqual(reports[0].message, MESSAGE)
        self.assertEqual(reports[0].original, "'They said \"here are smart quotes!\"'")
        self.assertEqual(reports[0].fixed, "'They said “here are smart quotes!”'")
        self.assertEqual((reports[0].line, reports[0].column), (1, 14))
        self.assertEqual(document.get_content(), "var string = 'They said “here are smart quotes!”';")
        self.assertEqual(self.bot.get_correction_counter(), 1)

    def test_check_markup(self):
        document = SourceDocument("test.jsx", "<>Here's some quotes!</>\n<Component name=\"Barry's name\" />",
                                  Syntax.JSX)
        reports = self.bot.check_document(document)
        self.assertEqual([report.fixed for report in reports], ["Here’s some quotes!", "\"Barry’s name\""])
        self.assertEqual(document.get_content(), "<>Here’s some quotes!</>\n<Component name=\"Barry’s name\" />")
        self.assertEqual((reports[1].line, reports[1].column), (2, 17))

    def test_jsx_code_is_not_touched(self):
        content = 'import React from "react";\n' \
                  'const App = () => <button onClick={() => alert("hi")}>Go</button>;\n'
        document = SourceDocument("App.jsx", content, guess_syntax("App.jsx"))
        self.assertEqual(self.bot.check_document(document), [])
        self.assertEqual(document.get_content(), content)

        content = 'const App = () => <p title="Jane\'s">{t("x")} "Go"</p>;\n'
        document = SourceDocument("App.jsx", content, guess_syntax("App.jsx"))
        self.assertEqual(len(self.bot.check_document(document)), 2)
        self.assertEqual(document.get_content(), 'const App = () => <p title="Jane’s">{t("x")} “Go”</p>;\n')

    def test_json(self):
        content = '{"name": "smartquotes", "description": "Jane\'s tool"}'
        document = SourceDocument("package.json", content, guess_syntax("package.json"))
        reports = self.bot.check_document(document)
        self.assertEqual(len(reports), 1)
        self.assertEqual(document.get_content(), '{"name": "smartquotes", "description": "Jane’s tool"}')

    def test_warning_counter(self):
        # One warning for one span, even if the span has several lines
        document = SourceDocument("test.txt", "It's Jane's\nfriend\nand more")
        with self.assertLogs('smartquotes.bot', level='WARNING'):
            self.bot.check_document(document)
        self.assertEqual(self.bot.get_warning_counter(), 1)
        self.assertTrue(self.bot.get_warnings().startswith("1 warnings"))

    def test_no_straight_quotes(self):
        document = SourceDocument("test.txt", "They said “here are straight quotes!”\n\nJane’s")
        self.assertEqual(self.bot.check_document(document), [])
        self.assertFalse(document.has_changes())
        self.assertEqual(self.bot.get_report_counter(), 0)

    def test_ambiguous_apostrophes(self):
        # Reported, but not corrected and with a warning
        document = SourceDocument("test.txt", "Intro\n\nThis is 'Jane's friend")
        with self.assertLogs('smartquotes.bot', level='WARNING'):
            reports = self.bot.check_document(document)
        self.assertEqual(len(reports), 1)
        self.assertIsNone(reports[0].fixed)
        self.assertIn("Please correct manually", reports[0].warnings)
        self.assertEqual((reports[0].line, reports[0].column), (3, 1))
        self.assertFalse(document.has_changes())
        self.assertEqual(self.bot.get_warning_counter(), 1)
        self.assertEqual(self.bot.get_correction_counter(), 0)
        self.assertIn("test.txt:3:1", self.bot.get_warnings())
        # We must not have changed the rewriter logger permanently
        self.assertTrue(logging.getLogger("smartquotes.quotes.rewriter").propagate)
        self.assertEqual(logging.getLogger("smartquotes.quotes.rewriter").handlers, [])

    def test_many_apostrophes_in_markup(self):
        bot = QuoteBot(create_config("[smartquotes]\ninput_format = all\n"))
        content = """
        <Text>
          Uh-uh. You know, with you it&apos;s always, &apos;Me, me, me!&apos; Wll,
          guess that! Now it&apos;s my turn!
        </Text>
        """
        document = SourceDocument("test.jsx", content, Syntax.JSX)
        with self.assertLogs('smartquotes.bot', level='WARNING'):
            reports = bot.check_document(document)
        self.assertEqual(len(reports), 1)
        self.assertIsNone(reports[0].fixed)
        self.assertEqual(document.get_content(), content)

    def test_diff(self):
        document = SourceDocument("test.txt", "This is Jane's friend")
        self.bot.check_document(document)
        self.assertIn("test.txt: ", self.bot.get_correction_diff())
        self.assertIn("’", self.bot.get_correction_diff())

    def test_span_report(self):
        report = SpanReport("test.txt", 2, 5, "Jane's", "Jane’s", "")
        self.assertEqual(str(report), f"test.txt:2:5: {MESSAGE} Jane's -> Jane’s")
        report = SpanReport("test.txt", 2, 5, "'Jane's", None, "Warning")
        self.assertEqual(str(report), f"test.txt:2:5: {MESSAGE}")


class TestQuoteBotRun(unittest.TestCase):
    def test_run_saves_files(self):
        with TemporaryDirectory() as folder:
            filename = join(folder, "test.html")
            with open(filename, "w", encoding="utf-8") as f:
                f.write("<p title=\"Jane's\">They said \"hi\"</p>\n")
            bot = QuoteBot(create_config())
            with redirect_stdout(io.StringIO()) as output:
                self.assertEqual(bot.run([filename]), 2)
            self.assertIn("2 corrections, 1 files saved", output.getvalue())
            with open(filename, "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "<p title=\"Jane’s\">They said “hi”</p>\n")

    def test_run_simulate(self):
        with TemporaryDirectory() as folder:
            filename = join(folder, "test.txt")
            with open(filename, "w", encoding="utf-8") as f:
                f.write("This is Jane's friend")
            bot = QuoteBot(create_config(), simulate=True)
            with redirect_stdout(io.StringIO()) as output:
                bot.run([filename])
            self.assertIn("--simulate", output.getvalue())
            self.assertEqual(bot.get_correction_counter(), 1)
            with open(filename, "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "This is Jane's friend")

    def test_run_with_syntax(self):
        with TemporaryDirectory() as folder:
            filename = join(folder, "notes.txt")
            with open(filename, "w", encoding="utf-8") as f:
                f.write("x = 'It\\'s'  # \"comment\"")
            bot = QuoteBot(create_config(), syntax=Syntax.SCRIPT)
            with redirect_stdout(io.StringIO()):
                bot.run([filename])
            with open(filename, "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "x = 'It’s'  # \"comment\"")

    def test_run_unknown_file_type(self):
        with TemporaryDirectory() as folder:
            filename = join(folder, "data.bin")
            with open(filename, "w", encoding="utf-8") as f:
                f.write("They said \"hi\"")
            bot = QuoteBot(create_config())
            with redirect_stdout(io.StringIO()):
                with self.assertLogs('smartquotes.bot', level='WARNING') as logs:
                    self.assertEqual(bot.run([filename]), 0)
            self.assertIn("unknown file type", logs.output[0])
            with open(filename, "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "They said \"hi\"")

            # Explicitly given syntax
            bot = QuoteBot(create_config(), syntax=Syntax.TEXT)
            with redirect_stdout(io.StringIO()):
                self.assertEqual(bot.run([filename]), 1)
            with open(filename, "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "They said “hi”")

    def test_run_missing_file(self):
        bot = QuoteBot(create_config())
        with redirect_stdout(io.StringIO()) as output:
            self.assertEqual(bot.run(["/not/existing/file.txt"]), 0)
        self.assertIn("Error while trying to correct /not/existing/file.txt", output.getvalue())

    def test_run_wiki_page_without_site(self):
        bot = QuoteBot(create_config())
        with redirect_stdout(io.StringIO()) as output:
            bot.run(["wiki:Prayer"])
        self.assertIn("Missing site setting", output.getvalue())

    @patch("smartquotes.quotes.bot.WikiLib.get_page_source")
    def test_run_wiki_page(self, mock_get_page_source):
        mock_get_page_source.return_value = "He said \"hi\"\n\n''Italic'' isn't touched"
        bot = QuoteBot(create_config("[smartquotes]\nsite = https://wiki.example.org\n"))
        with redirect_stdout(io.StringIO()) as output:
            with self.assertLogs('smartquotes.bot', level='WARNING') as logs:
                self.assertEqual(bot.run(["wiki:Prayer"]), 2)
        mock_get_page_source.assert_called_once_with("Prayer")
        self.assertEqual(bot.get_correction_counter(), 1)
        self.assertEqual(bot.get_warning_counter(), 1)
        self.assertTrue(any("Can't save corrections of wiki:Prayer" in line for line in logs.output))
        self.assertIn("wiki:Prayer:1:1", output.getvalue())

    @patch("smartquotes.quotes.bot.WikiLib.get_page_source")
    def test_run_wiki_page_not_found(self, mock_get_page_source):
        mock_get_page_source.side_effect = WikiError("Page Not_existing doesn't exist")
        bot = QuoteBot(create_config("[smartquotes]\nsite = https://wiki.example.org\n"))
        with redirect_stdout(io.StringIO()) as output:
            bot.run(["wiki:Not_existing"])
        self.assertIn("Error while trying to correct wiki:Not_existing: Page Not_existing doesn't exist",
                      output.getvalue())


if __name__ == '__main__':
    unittest.main()
