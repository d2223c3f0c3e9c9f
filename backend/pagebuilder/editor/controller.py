"""
Section editor controller.

Drives the property panel for the selected section. Keystroke edits are
buffered per section and merged into the document as one history entry once
the user pauses for ``debounce_seconds``, blurs the field, or selects another
section. List-item add/remove/move commit immediately.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from pagebuilder.config import BaseConfig
from pagebuilder.domain.document import PageDocument, Section
from pagebuilder.domain.exceptions import SchemaError, SectionNotFound, ValidationError
from pagebuilder.domain.registry import FieldSpec, field_set, new_list_item
from pagebuilder.domain.richtext import normalize_html
from pagebuilder.domain.schema import Direction
from .session import EditingSession, PageResult

logger = logging.getLogger(__name__)


@dataclass
class PendingEdit:
    section_id: str
    patch: Dict[str, Any] = field(default_factory=dict)
    last_change_at: float = 0.0


class SectionEditorController:
    def __init__(
        self,
        session: EditingSession,
        *,
        debounce_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.debounce_seconds = (
            BaseConfig.EDIT_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self._clock = clock
        self.selected_section_id: Optional[str] = None
        self.pending: Optional[PendingEdit] = None

    # ------------------------
    # Selection
    # ------------------------

    def select(self, section_id: str) -> Section:
        self.flush()
        try:
            section = self.session.get_section(section_id)
        except SectionNotFound:
            self.selected_section_id = None
            raise
        self.selected_section_id = section_id
        return section

    def deselect(self) -> Optional[PageResult]:
        result = self.flush()
        self.selected_section_id = None
        return result

    @property
    def section(self) -> Optional[Section]:
        """The selected section as currently stored (pending edits excluded)."""
        if self.selected_section_id is None:
            return None
        return self._require_section()

    def _require_section(self) -> Section:
        if self.selected_section_id is None:
            raise SchemaError("No section selected")
        try:
            return self.session.get_section(self.selected_section_id)
        except SectionNotFound:
            # removed by undo or another op
            self.selected_section_id = None
            self.pending = None
            raise

    def fields(self) -> Tuple[FieldSpec, ...]:
        section = self.section
        if section is None:
            return ()
        return field_set(section.type)

    def value(self, name: str) -> Any:
        """What the form shows for ``name``: the pending edit if any, else the stored value."""
        section = self._require_section()
        if self.pending and name in self.pending.patch:
            return self.pending.patch[name]
        return getattr(section.content, name)

    # ------------------------
    # Buffered edits
    # ------------------------

    def _field_spec(self, section: Section, name: str) -> FieldSpec:
        for spec in field_set(section.type):
            if spec.name == name:
                return spec
        raise SchemaError(f"{section.type.value} has no field {name!r}")

    def _buffer(self, section: Section, name: str, value: Any, now: Optional[float]) -> None:
        now = self._clock() if now is None else now
        if self.pending is None or self.pending.section_id != section.id:
            self.flush()
            self.pending = PendingEdit(section_id=section.id)
        self.pending.patch[name] = value
        self.pending.last_change_at = now

    def edit_field(self, name: str, value: Any, now: Optional[float] = None) -> None:
        section = self._require_section()
        spec = self._field_spec(section, name)
        if spec.kind == "list":
            raise SchemaError(f"{name} is a list; use add_item/remove_item/move_item/edit_item")
        if spec.is_rich_text:
            value = normalize_html(value)
        self._buffer(section, name, value, now)

    def edit_rich_text(self, name: str, html: str, now: Optional[float] = None) -> None:
        section = self._require_section()
        if not self._field_spec(section, name).is_rich_text:
            raise SchemaError(f"{name} is not a rich-text field")
        self._buffer(section, name, normalize_html(html), now)

    def edit_item(self, list_name: str, item_id: str, now: Optional[float] = None, **values: Any) -> None:
        """Buffered edit of one list item's fields (e.g. typing a caption)."""
        section = self._require_section()
        items = self._items(section, list_name)
        for index, item in enumerate(items):
            if item.id == item_id:
                unknown = [k for k in values if k not in item.__dataclass_fields__ or k == "id"]
                if unknown:
                    raise SchemaError(f"Unknown item fields: {', '.join(unknown)}")
                for key, val in values.items():
                    setattr(item, key, val)
                items[index] = item
                break
        else:
            raise SchemaError(f"{list_name} has no item {item_id!r}")
        self._buffer(section, list_name, items, now)

    def tick(self, now: Optional[float] = None) -> bool:
        """Commit the pending edit if the debounce window has elapsed."""
        if self.pending is None:
            return False
        now = self._clock() if now is None else now
        if now - self.pending.last_change_at < self.debounce_seconds:
            return False
        self.flush()
        return True

    def blur(self) -> Optional[PageResult]:
        return self.flush()

    def flush(self) -> Optional[PageResult]:
        """Merge the pending edit into the document as one history entry."""
        pending, self.pending = self.pending, None
        if pending is None or not pending.patch:
            return None
        try:
            result = self.session.update_section_content(pending.section_id, pending.patch)
        except SectionNotFound:
            logger.info("Dropping pending edit for removed section %s", pending.section_id)
            if self.selected_section_id == pending.section_id:
                self.selected_section_id = None
            raise
        if isinstance(result, ValidationError):
            logger.warning("Rejected edit for section %s: %s", pending.section_id, result)
        return result

    # ------------------------
    # List fields
    # ------------------------

    def _items(self, section: Section, list_name: str) -> List[Any]:
        spec = self._field_spec(section, list_name)
        if spec.kind != "list":
            raise SchemaError(f"{list_name} is not a list field")
        if self.pending and self.pending.section_id == section.id and list_name in self.pending.patch:
            current = self.pending.patch[list_name]
        else:
            current = getattr(section.content, list_name)
        item_cls = section.content.ITEM_TYPES[list_name]
        return [item_cls.from_dict(item) for item in current]

    def _commit_items(self, list_name: str, items: List[Any]) -> PageResult:
        self.flush()
        section = self._require_section()
        return self.session.update_section_content(section.id, {list_name: items})

    def add_item(self, list_name: str, **values: Any) -> PageResult:
        self.flush()
        section = self._require_section()
        items = self._items(section, list_name)
        items.append(new_list_item(section.type, list_name, **values))
        return self._commit_items(list_name, items)

    def remove_item(self, list_name: str, item_id: str) -> PageResult:
        self.flush()
        section = self._require_section()
        items = self._items(section, list_name)
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            raise SchemaError(f"{list_name} has no item {item_id!r}")
        return self._commit_items(list_name, remaining)

    def move_item(self, list_name: str, item_id: str, direction: Direction | str) -> PageResult:
        self.flush()
        direction = Direction(direction)
        section = self._require_section()
        items = self._items(section, list_name)
        index = next((i for i, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            raise SchemaError(f"{list_name} has no item {item_id!r}")
        target = index - 1 if direction is Direction.UP else index + 1
        if 0 <= target < len(items):
            items[index], items[target] = items[target], items[index]
        return self._commit_items(list_name, items)

    # ------------------------
    # Style and toolbar actions
    # ------------------------

    def edit_style(self, **patch: Any) -> PageResult:
        self.flush()
        section = self._require_section()
        return self.session.update_section_style(section.id, patch)

    def remove_selected(self) -> PageDocument:
        self.flush()
        section = self._require_section()
        self.selected_section_id = None
        return self.session.remove_section(section.id)

    def undo(self) -> bool:
        self.flush()
        changed = self.session.undo()
        self._drop_stale_selection()
        return changed

    def redo(self) -> bool:
        self.flush()
        changed = self.session.redo()
        self._drop_stale_selection()
        return changed

    def _drop_stale_selection(self) -> None:
        if self.selected_section_id is None:
            return
        try:
            self.session.get_section(self.selected_section_id)
        except SectionNotFound:
            self.selected_section_id = None
