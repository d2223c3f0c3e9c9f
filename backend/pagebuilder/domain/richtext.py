"""
Rich-text normalisation.

The WYSIWYG editor emits HTML. Before it is merged into section content it is
reduced to a small, stable subset so that equal documents serialise equally
and nothing executable reaches the public page.
"""
from __future__ import annotations

import re

import markdown
from bs4 import BeautifulSoup, Comment

ALLOWED_TAGS = {
    "p", "br", "strong", "em", "u", "s", "a", "ul", "ol", "li",
    "h2", "h3", "blockquote", "code", "pre", "hr", "img",
}
RENAMED_TAGS = {"b": "strong", "i": "em", "strike": "s", "del": "s", "h1": "h2", "h4": "h3"}
DROPPED_TAGS = {"script", "style", "iframe", "object", "embed", "form", "input", "button"}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "target", "rel"},
    "img": {"src", "alt"},
}
ALIGNABLE_TAGS = {"p", "h2", "h3"}
SAFE_URL = re.compile(r"^(https?://|mailto:|tel:|/|#)", re.IGNORECASE)
TEXT_ALIGN = re.compile(r"text-align:\s*(left|center|right|justify)", re.IGNORECASE)
EMPTY_BLOCKS = {"p", "h2", "h3", "li", "blockquote"}


def _clean_attributes(tag) -> None:
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
    align = None
    if tag.name in ALIGNABLE_TAGS and tag.get("style"):
        match = TEXT_ALIGN.search(tag["style"])
        if match and match.group(1).lower() != "left":
            align = match.group(1).lower()

    tag.attrs = {k: v for k, v in tag.attrs.items() if k in allowed}

    for attr in ("href", "src"):
        if attr in tag.attrs and not SAFE_URL.match(tag.attrs[attr].strip()):
            del tag.attrs[attr]
    if tag.name == "a" and tag.get("target") == "_blank":
        tag["rel"] = "noopener noreferrer"
    if align:
        tag["style"] = f"text-align: {align}"


def _is_empty(tag) -> bool:
    if tag.find("img") or tag.find("hr"):
        return False
    return not tag.get_text(strip=True)


def normalize_html(html: str | None) -> str:
    """Return a sanitised, whitespace-stable rendition of ``html`` ("" if empty)."""
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.name in DROPPED_TAGS:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name in RENAMED_TAGS:
            tag.name = RENAMED_TAGS[tag.name]
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        _clean_attributes(tag)

    # Inner blocks first so nested empties collapse outwards.
    for tag in reversed(soup.find_all(EMPTY_BLOCKS)):
        if _is_empty(tag):
            tag.decompose()

    if not soup.get_text(strip=True) and not soup.find(["img", "hr"]):
        return ""
    return str(soup).strip()


def markdown_to_html(text: str | None) -> str:
    """Convert legacy markdown bodies to normalised HTML."""
    if not text or not text.strip():
        return ""
    return normalize_html(markdown.markdown(text, extensions=["nl2br"]))


def looks_like_html(text: str | None) -> bool:
    return bool(text) and text.lstrip().startswith("<")
