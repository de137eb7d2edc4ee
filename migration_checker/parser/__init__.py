"""migration_checker.parser: HTML → title / links / body text."""

from .html_parser import ParsedPage, extract_body_text, extract_title, parse_html

__all__ = ["ParsedPage", "parse_html", "extract_title", "extract_body_text"]
