"""Tests for the update-history link parser.

All tests operate on literal markup strings — no I/O, no mocking required.
Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import datetime
import unittest

from patch_lag.analyzers.update_links import (
    extract_build,
    extract_info_url,
    extract_kb,
    extract_label,
    extract_release_date,
    is_update_link,
    mentions_build,
    normalize_label,
    parse,
)
from patch_lag.errors import DateParseFailed, MalformedUpdateLink
from patch_lag.models.schema import RawLinkElement


def _link(markup: str, href: str = "/help/5028185", css: str = "supLeftNavLink") -> RawLinkElement:
    return RawLinkElement(label="", href=href, css_class=css, markup=markup)


JULY = '<a class="supLeftNavLink" href="/help/5028185">July 11, 2023—KB5028185 (OS Build 22621.1992)</a>'


class TestParseScenario(unittest.TestCase):

    def test_july_2023_update(self):
        record = parse(_link(JULY))
        self.assertEqual(record.name, "July 11, 2023 - KB5028185 (OS Build 22621.1992)")
        self.assertEqual(record.kb, "KB5028185")
        self.assertEqual(record.info_url, "https://support.microsoft.com/help/5028185")
        self.assertEqual(record.build, "22621.1992")
        self.assertEqual(record.release_date, datetime.date(2023, 7, 11))

    def test_parse_is_deterministic(self):
        self.assertEqual(parse(_link(JULY)), parse(_link(JULY)))

    def test_build_is_substring_of_markup(self):
        markups = [
            JULY,
            '<a class="supLeftNavLink" href="/help/5031455">October 31, 2023—KB5031455 '
            '(OS Builds 22621.2506 and 22631.2506) Preview</a>',
        ]
        for markup in markups:
            with self.subTest(markup=markup):
                self.assertIn(parse(_link(markup)).build, markup)

    def test_plain_hyphen_separator(self):
        markup = '<a class="supLeftNavLink" href="/help/5032190">November 14, 2023 - KB5032190 (OS Build 22621.2715)</a>'
        record = parse(_link(markup, href="/help/5032190"))
        self.assertEqual(record.name, "November 14, 2023 - KB5032190 (OS Build 22621.2715)")
        self.assertEqual(record.release_date, datetime.date(2023, 11, 14))

    def test_custom_origin(self):
        record = parse(_link(JULY), origin="https://support.example.test/")
        self.assertEqual(record.info_url, "https://support.example.test/help/5028185")

    def test_not_update_link_rejected(self):
        with self.assertRaises(MalformedUpdateLink):
            parse(_link(JULY, css="ocpArticleLink"))


class TestPredicate(unittest.TestCase):

    def test_nav_link_with_build(self):
        self.assertTrue(is_update_link(_link(JULY)))

    def test_wrong_class(self):
        self.assertFalse(is_update_link(_link(JULY, css="footerLink")))

    def test_no_build_marker(self):
        markup = '<a class="supLeftNavLink" href="/help/4043454">Windows 11 release information</a>'
        self.assertFalse(is_update_link(_link(markup)))

    def test_class_among_several(self):
        self.assertTrue(is_update_link(_link(JULY, css="supLeftNavLink active")))


class TestExtraction(unittest.TestCase):

    def test_label_between_tags(self):
        self.assertEqual(extract_label('<a href="/x"> Some text </a>'), "Some text")

    def test_label_missing_close_tag(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_label('<a href="/x">dangling')

    def test_label_empty(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_label('<a href="/x"></a>')

    def test_normalize_escaped_and_entity_dashes(self):
        expected = "May 9, 2023 - KB5026372 (OS Build 22621.1702)"
        for raw in (
            "May 9, 2023\\u2014KB5026372 (OS Build 22621.1702)",
            "May 9, 2023&#8212;KB5026372 (OS Build 22621.1702)",
            "May 9, 2023&mdash;KB5026372 (OS Build 22621.1702)",
        ):
            with self.subTest(raw=raw):
                self.assertEqual(normalize_label(raw), expected)

    def test_release_date_single_digit_day(self):
        self.assertEqual(
            extract_release_date("January 9, 2024 - KB5034123 (OS Build 22621.3007)"),
            datetime.date(2024, 1, 9),
        )

    def test_release_date_garbage(self):
        with self.assertRaises(DateParseFailed):
            extract_release_date("Someday - KB5034123 (OS Build 22621.3007)")

    def test_date_failure_is_malformed_link(self):
        self.assertTrue(issubclass(DateParseFailed, MalformedUpdateLink))

    def test_kb_from_href(self):
        self.assertEqual(extract_kb("/help/5028185"), "KB5028185")
        self.assertEqual(extract_kb("/en-us/help/5028185/"), "KB5028185")

    def test_kb_empty_href(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_kb("")

    def test_info_url_absolute_href_unchanged(self):
        url = "https://support.microsoft.com/help/5028185"
        self.assertEqual(extract_info_url(url), url)

    def test_info_url_relative_without_slash(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_info_url("help/5028185")

    def test_dual_build(self):
        markup = "October 31, 2023—KB5031455 (OS Builds 22621.2506 and 22631.2506) Preview"
        self.assertEqual(extract_build(markup), "22621.2506 and 22631.2506")

    def test_build_missing_parentheses(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_build("July 11, 2023—KB5028185 OS Build 22621.1992")

    def test_build_without_number(self):
        with self.assertRaises(MalformedUpdateLink):
            extract_build("July 11, 2023—KB5028185 (OS Build pending)")


class TestMentionsBuild(unittest.TestCase):

    def test_full_build(self):
        self.assertTrue(mentions_build(JULY, "22621.1992"))

    def test_major_build(self):
        self.assertTrue(mentions_build(JULY, "22621"))

    def test_prefix_of_longer_number(self):
        self.assertFalse(mentions_build("(OS Build 1005523.1)", "100"))
        self.assertFalse(mentions_build("(OS Build 22621.1992)", "2262"))

    def test_truncated_ubr(self):
        self.assertFalse(mentions_build(JULY, "22621.19"))

    def test_ubr_alone_not_major(self):
        self.assertFalse(mentions_build(JULY, "1992"))

    def test_empty_build(self):
        self.assertFalse(mentions_build(JULY, ""))


if __name__ == "__main__":
    unittest.main()
