"""
Page Document Model operations.

Every operation is a pure transformation: it copies the input document,
applies exactly one change and returns the new value. Section ``order`` is
renumbered after each structural change so it is always ``0..n-1``.

Validation failures on user input are returned as ``ValidationError``
values, never raised. A missing section id raises ``SectionNotFound``.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional, Union

from pagebuilder.utils.order import compact_order
from .document import PageDocument
from .exceptions import FieldError, SchemaError, ValidationError
from .invariants.page import assert_page
from .registry import get_defaults, validate
from .schema import DESIGN_TOKENS, Direction, Layout, Padding, SectionType, StyleProps, new_id

logger = logging.getLogger(__name__)

PageResult = Union[PageDocument, ValidationError]

STYLE_FIELDS = ("background", "text_color", "padding", "layout")
HEX_COLOR_LENGTHS = (4, 7)


def _finish(doc: PageDocument, action: str, **details: Any) -> PageDocument:
    compact_order(doc.sections)
    assert_page(doc)
    logger.debug("page %s: %s %s", doc.id, action, details)
    return doc


def add_section(
    doc: PageDocument,
    section_type: SectionType | str,
    at_index: Optional[int] = None,
) -> PageDocument:
    """Insert a registry-default section at ``at_index`` (default: end)."""
    section = get_defaults(section_type)
    new_doc = copy.deepcopy(doc)

    if at_index is None or at_index > len(new_doc.sections):
        at_index = len(new_doc.sections)
    at_index = max(at_index, 0)

    new_doc.sections.insert(at_index, section)
    return _finish(new_doc, "section.add", section_id=section.id, type=section.type.value, index=at_index)


def remove_section(doc: PageDocument, section_id: str) -> PageDocument:
    index = doc.section_index(section_id)
    new_doc = copy.deepcopy(doc)
    del new_doc.sections[index]
    return _finish(new_doc, "section.remove", section_id=section_id)


def move_section(doc: PageDocument, section_id: str, direction: Direction | str) -> PageDocument:
    """Swap with the neighbour in ``direction``. At a boundary this is a no-op copy."""
    direction = Direction(direction)
    index = doc.section_index(section_id)
    target = index - 1 if direction is Direction.UP else index + 1

    new_doc = copy.deepcopy(doc)
    if 0 <= target < len(new_doc.sections):
        sections = new_doc.sections
        sections[index], sections[target] = sections[target], sections[index]
    return _finish(new_doc, "section.move", section_id=section_id, direction=direction.value)


def reorder_section(doc: PageDocument, section_id: str, to_index: int) -> PageDocument:
    """Drag-reorder: move a section to an absolute position (clamped)."""
    index = doc.section_index(section_id)
    new_doc = copy.deepcopy(doc)
    moved = new_doc.sections.pop(index)
    to_index = min(max(to_index, 0), len(new_doc.sections))
    new_doc.sections.insert(to_index, moved)
    return _finish(new_doc, "section.reorder", section_id=section_id, to_index=to_index)


def duplicate_section(doc: PageDocument, section_id: str) -> PageDocument:
    index = doc.section_index(section_id)
    new_doc = copy.deepcopy(doc)

    clone = copy.deepcopy(new_doc.sections[index])
    clone.id = new_id()
    clone.anchor_id = f"{clone.anchor_id}-copy" if clone.anchor_id else ""
    # List items keep their own ids unique across the page.
    for list_name in clone.content.ITEM_TYPES:
        for item in getattr(clone.content, list_name):
            item.id = new_id()

    new_doc.sections.insert(index + 1, clone)
    return _finish(new_doc, "section.duplicate", source_id=section_id, section_id=clone.id)


def toggle_visibility(doc: PageDocument, section_id: str) -> PageDocument:
    index = doc.section_index(section_id)
    new_doc = copy.deepcopy(doc)
    section = new_doc.sections[index]
    section.visible = not section.visible
    return _finish(new_doc, "section.visibility", section_id=section_id, visible=section.visible)


def update_section_content(
    doc: PageDocument,
    section_id: str,
    patch: Mapping[str, Any],
    *,
    strict: bool = False,
) -> PageResult:
    """
    Shallow-merge ``patch`` into a section's content.

    Interactive edits (``strict=False``) are stored as typed, even with empty
    required fields. ``strict=True`` additionally applies the registry's
    required-content rules, which is what save and publish use.
    """
    index = doc.section_index(section_id)
    section = doc.sections[index]

    try:
        content = section.content.merged(patch)
    except SchemaError as exc:
        unknown = section.content.unknown_keys(patch)
        fields = unknown or ["content"]
        return ValidationError([FieldError(name, str(exc)) for name in fields])

    if strict:
        errors = validate(section.type, content)
        if errors:
            return ValidationError(errors)

    new_doc = copy.deepcopy(doc)
    new_doc.sections[index].content = content
    return _finish(new_doc, "section.content", section_id=section_id, fields=sorted(patch))


def _style_errors(patch: Mapping[str, Any]) -> list:
    errors = []
    for name, value in patch.items():
        if name not in STYLE_FIELDS:
            errors.append(FieldError(name, "Unknown style property"))
        elif name == "padding" and value not in {p.value for p in Padding}:
            errors.append(FieldError(name, f"Must be one of {', '.join(p.value for p in Padding)}"))
        elif name == "layout" and value not in {l.value for l in Layout}:
            errors.append(FieldError(name, f"Must be one of {', '.join(l.value for l in Layout)}"))
        elif name in ("background", "text_color") and not _is_color(value):
            errors.append(FieldError(name, "Must be a design token or #rgb / #rrggbb color"))
    return errors


def _is_color(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if value in DESIGN_TOKENS:
        return True
    if value.startswith("#") and len(value) in HEX_COLOR_LENGTHS:
        return all(c in "0123456789abcdefABCDEF" for c in value[1:])
    return False


def update_section_style(doc: PageDocument, section_id: str, patch: Mapping[str, Any]) -> PageResult:
    index = doc.section_index(section_id)

    errors = _style_errors(patch)
    if errors:
        return ValidationError(errors)

    new_doc = copy.deepcopy(doc)
    section = new_doc.sections[index]
    merged = {**section.style.to_dict(), **patch}
    section.style = StyleProps.from_dict(merged)
    return _finish(new_doc, "section.style", section_id=section_id, fields=sorted(patch))


def validate_page(doc: PageDocument) -> list:
    """Required-content errors for every section, prefixed with the section id."""
    errors = []
    for section in doc.sections:
        for error in validate(section.type, section.content):
            errors.append(FieldError(f"{section.id}.{error.field}", error.message))
    return errors


def validate_site(site) -> list:
    """``validate_page`` across every page, prefixed with the page id."""
    errors = []
    for page in site.pages:
        for error in validate_page(page):
            errors.append(FieldError(f"{page.id}.{error.field}", error.message))
    return errors
