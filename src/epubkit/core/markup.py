"""Lenient markup parsing shared by every stage."""

import warnings

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

# Suppress XML parsing warnings - OPF, NCX and XHTML all go through the HTML parser
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse XML or HTML without ever rejecting malformed input.

    The HTML parser lowercases tag and attribute names and keeps namespace
    prefixes as part of the name (`dc:title`, `epub:type`).
    """
    return BeautifulSoup(markup, "lxml")


def local_name(tag: Tag) -> str:
    """Tag name without its namespace prefix."""
    return tag.name.rsplit(":", 1)[-1]


def class_list(tag: Tag) -> list[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)


def epub_types(tag: Tag) -> list[str]:
    """Values of the epub:type attribute."""
    value = tag.get("epub:type") or ""
    if isinstance(value, list):
        value = " ".join(value)
    return value.lower().split()
