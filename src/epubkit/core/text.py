"""Entity decoding, whitespace rules and the flattened text view.

`html_to_text` keeps the ordering of the legacy text view: every rule runs
over the output of the previous one, so moving a rule changes the result
(headings must become markers before tags are stripped, entities must be
decoded after stripping so `&lt;p&gt;` survives as text).
"""

import re

ENTITY_TABLE = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&#8220;": '"',
    "&#8221;": '"',
    "&#8216;": "'",
    "&#8217;": "'",
    "&#8211;": "–",
    "&#8212;": "—",
    "&#8230;": "…",
}

PAGE_BREAK_MARKER = "[PAGE BREAK]"

_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in ENTITY_TABLE))

_STYLE_RE = re.compile(r"<style[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_HEADING_OPEN_RE = re.compile(r"<h([1-6])(?:\s[^>]*)?>", re.IGNORECASE)
_HEADING_CLOSE_RE = re.compile(r"</h[1-6]\s*>", re.IGNORECASE)
_P_OPEN_RE = re.compile(r"<p(?:\s[^>]*)?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p\s*>", re.IGNORECASE)
# Divs carrying a page-break marker are left for _PAGE_BREAK_RE
_DIV_OPEN_RE = re.compile(r"<div(?![^>]*page-?break)(?:\s[^>]*)?>", re.IGNORECASE)
_DIV_CLOSE_RE = re.compile(r"</div\s*>", re.IGNORECASE)
_BLOCKQUOTE_OPEN_RE = re.compile(r"<blockquote(?:\s[^>]*)?>", re.IGNORECASE)
_BLOCKQUOTE_CLOSE_RE = re.compile(r"</blockquote\s*>", re.IGNORECASE)
_LIST_RE = re.compile(r"</?[uo]l(?:\s[^>]*)?>", re.IGNORECASE)
_LI_OPEN_RE = re.compile(r"<li(?:\s[^>]*)?>", re.IGNORECASE)
_LI_CLOSE_RE = re.compile(r"</li\s*>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PAGE_BREAK_RE = re.compile(r"<(?:div|span|hr)\s[^>]*page-?break[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")

_HSPACE_RE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE_RE = re.compile(r" ?\n ?")
_EXTRA_NEWLINES_RE = re.compile(r"\n{3,}")


def decode_entities(text: str) -> str:
    """Decode the fixed entity table in a single pass.

    A single pass keeps `&amp;lt;` as `&lt;` instead of decoding it twice.
    """
    return _ENTITY_RE.sub(lambda m: ENTITY_TABLE[m.group(0)], text)


def collapse_whitespace(text: str) -> str:
    """Collapse spaces while keeping paragraph breaks (at most one blank line)."""
    text = _HSPACE_RE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE_RE.sub("\n", text)
    text = _EXTRA_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def normalize_inline(text: str) -> str:
    """Collapse all whitespace, newlines included, to single spaces."""
    return " ".join(text.split())


def strip_tags(html: str) -> str:
    """Replace every tag with a space."""
    return _TAG_RE.sub(" ", html)


def html_to_text(html: str) -> str:
    """Flatten markup into readable text with light structure markers.

    Headings become `#` marker lines, blockquotes `> ` lines, list items
    `• ` bullets and page-break elements a `[PAGE BREAK]` line.
    """
    text = _STYLE_RE.sub("", html)
    text = _SCRIPT_RE.sub("", text)

    text = _HEADING_OPEN_RE.sub(lambda m: "\n" + "#" * int(m.group(1)) + " ", text)
    text = _HEADING_CLOSE_RE.sub("\n\n", text)

    text = _P_OPEN_RE.sub("\n", text)
    text = _P_CLOSE_RE.sub("\n\n", text)
    text = _DIV_OPEN_RE.sub("\n", text)
    text = _DIV_CLOSE_RE.sub("\n", text)

    text = _BLOCKQUOTE_OPEN_RE.sub("\n> ", text)
    text = _BLOCKQUOTE_CLOSE_RE.sub("\n\n", text)

    text = _LIST_RE.sub("\n", text)
    text = _LI_OPEN_RE.sub("• ", text)
    text = _LI_CLOSE_RE.sub("\n", text)
    text = _BR_RE.sub("\n", text)

    text = _PAGE_BREAK_RE.sub(f"\n{PAGE_BREAK_MARKER}\n", text)

    text = strip_tags(text)
    text = decode_entities(text)
    return collapse_whitespace(text)


def find_page_breaks(text: str) -> list[int]:
    """Character offsets of every page-break marker in flattened text."""
    return [m.start() for m in re.finditer(re.escape(PAGE_BREAK_MARKER), text)]
