"""
Editing session.

Holds the in-memory site document (the source of truth while editing), the
undo/redo history, the active page and the revision counters that the save
coordinator uses. Every mutation that changes the document commits exactly
one history entry; failed or no-op mutations commit nothing.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Union

from pagebuilder.config import BaseConfig
from pagebuilder.domain import operations
from pagebuilder.domain.document import PageDocument, Section, SiteDocument
from pagebuilder.domain.exceptions import FieldError, PageNotFound, SectionNotFound, ValidationError
from pagebuilder.domain.history import EditHistory
from pagebuilder.domain.invariants.page import assert_site
from pagebuilder.domain.schema import Direction, SectionType
from pagebuilder.domain.templates import build_site_template
from . import pages

logger = logging.getLogger(__name__)

PageResult = Union[PageDocument, ValidationError]
SiteResult = Union[SiteDocument, ValidationError]


class EditingSession:
    def __init__(
        self,
        clinic_id: str,
        site: Optional[SiteDocument] = None,
        *,
        auth_token: Optional[str] = None,
        server_revision: int = 0,
        history_limit: Optional[int] = None,
    ):
        site = site or SiteDocument.empty(clinic_id)
        assert_site(site)

        self.clinic_id = clinic_id
        self.auth_token = auth_token
        self.history: EditHistory[SiteDocument] = EditHistory(
            site, limit=history_limit or BaseConfig.HISTORY_LIMIT
        )
        self._site = self.history.current
        self.active_page_id = self._site.home.id

        # local_revision counts committed edits; saved_local_revision is the
        # local revision the server last acknowledged.
        self.local_revision = 0
        self.saved_local_revision = 0
        self.server_revision = server_revision
        # bumped on every reload so late save responses can be recognised
        self.generation = 0

    # ------------------------
    # State
    # ------------------------

    @property
    def site(self) -> SiteDocument:
        return self._site

    @property
    def active_page(self) -> PageDocument:
        return self._site.get_page(self.active_page_id)

    @property
    def is_dirty(self) -> bool:
        return self.local_revision != self.saved_local_revision

    def _commit(self, site: SiteDocument) -> None:
        self._site = site
        self.history.commit(site)
        self.local_revision += 1

    def _ensure_active_page(self) -> None:
        try:
            self._site.get_page(self.active_page_id)
        except PageNotFound:
            self.active_page_id = self._site.home.id

    def switch_page(self, page_id: str) -> PageDocument:
        page = self._site.get_page(page_id)
        self.active_page_id = page.id
        return page

    def hydrate(self, site: SiteDocument, revision: int) -> None:
        """Replace the document with a freshly loaded one and forget history."""
        assert_site(site)
        self.history.reset(site)
        self._site = self.history.current
        self.local_revision = 0
        self.saved_local_revision = 0
        self.server_revision = revision
        self.generation += 1
        self._ensure_active_page()
        logger.info("Session for clinic %s hydrated at revision %s", self.clinic_id, revision)

    def acknowledge_save(self, local_revision: int, server_revision: int) -> None:
        self.saved_local_revision = local_revision
        self.server_revision = server_revision

    def validate_site(self) -> List[FieldError]:
        return operations.validate_site(self._site)

    # ------------------------
    # Section operations
    # ------------------------
    # New sections go to the active page; everything addressed by section id
    # applies to the page holding that section.

    def page_for_section(self, section_id: str) -> PageDocument:
        """The page holding ``section_id``, active or not."""
        for page in self._site.pages:
            if any(s.id == section_id for s in page.sections):
                return page
        raise SectionNotFound(section_id)

    def _apply_page(
        self, page: PageDocument, operation: Callable[..., PageResult], *args: Any, **kwargs: Any
    ) -> PageResult:
        result = operation(page, *args, **kwargs)
        if isinstance(result, ValidationError):
            return result
        if result == page:
            logger.debug("No change to page %s; nothing committed", page.id)
            return result

        index = self._site.page_index(page.id)
        pages_ = list(self._site.pages)
        pages_[index] = result
        self._commit(replace(self._site, pages=pages_))
        return result

    def get_section(self, section_id: str) -> Section:
        return self.page_for_section(section_id).get_section(section_id)

    def add_section(self, section_type: SectionType | str, at_index: Optional[int] = None) -> Section:
        """Insert a default section and return it."""
        before = {s.id for s in self.active_page.sections}
        page = self._apply_page(self.active_page, operations.add_section, section_type, at_index)
        return next(s for s in page.sections if s.id not in before)

    def remove_section(self, section_id: str) -> PageDocument:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.remove_section, section_id)

    def move_section(self, section_id: str, direction: Direction | str) -> PageDocument:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.move_section, section_id, direction)

    def reorder_section(self, section_id: str, to_index: int) -> PageDocument:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.reorder_section, section_id, to_index)

    def duplicate_section(self, section_id: str) -> PageDocument:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.duplicate_section, section_id)

    def toggle_visibility(self, section_id: str) -> PageDocument:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.toggle_visibility, section_id)

    def update_section_content(self, section_id: str, patch: Mapping[str, Any]) -> PageResult:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.update_section_content, section_id, patch)

    def update_section_style(self, section_id: str, patch: Mapping[str, Any]) -> PageResult:
        page = self.page_for_section(section_id)
        return self._apply_page(page, operations.update_section_style, section_id, patch)

    # ------------------------
    # Site-scoped operations
    # ------------------------

    def _apply_site(self, operation: Callable[..., SiteResult], *args: Any, **kwargs: Any) -> SiteResult:
        result = operation(self._site, *args, **kwargs)
        if isinstance(result, ValidationError):
            return result
        if result == self._site:
            return result
        self._commit(result)
        self._ensure_active_page()
        return result

    def create_page(self, slug: str, title_en: str, title_ne: Optional[str] = None) -> SiteResult:
        before = {p.id for p in self._site.pages}
        result = self._apply_site(pages.create_page, slug, title_en, title_ne)
        if not isinstance(result, ValidationError):
            self.active_page_id = next(p.id for p in result.pages if p.id not in before)
        return result

    def create_page_from_template(self, template_id: str) -> SiteDocument:
        before = {p.id for p in self._site.pages}
        result = self._apply_site(pages.create_from_template, template_id)
        self.active_page_id = next(p.id for p in result.pages if p.id not in before)
        return result

    def delete_page(self, page_id: str) -> SiteResult:
        return self._apply_site(pages.delete_page, page_id)

    def rename_page(self, page_id: str, **changes: Optional[str]) -> SiteResult:
        return self._apply_site(pages.rename_page, page_id, **changes)

    def toggle_page_enabled(self, page_id: str) -> SiteDocument:
        return self._apply_site(pages.toggle_page_enabled, page_id)

    def update_navbar(self, navbar: Mapping[str, Any]) -> SiteResult:
        return self._apply_site(pages.update_navbar, navbar)

    def update_footer(self, footer: Mapping[str, Any]) -> SiteDocument:
        return self._apply_site(pages.update_footer, footer)

    def set_style_theme(self, theme_id: str) -> SiteResult:
        return self._apply_site(pages.set_style_theme, theme_id)

    def toggle_site_enabled(self) -> SiteDocument:
        return self._apply_site(pages.toggle_site_enabled)

    def apply_site_template(self, template_id: str) -> SiteDocument:
        """Replace every page with a starter site. Undoable like any other edit."""
        site = build_site_template(template_id, self.clinic_id)
        site.enabled = self._site.enabled
        self._commit(site)
        self.active_page_id = site.home.id
        logger.info("Clinic %s applied site template %s", self.clinic_id, template_id)
        return site

    # ------------------------
    # History
    # ------------------------

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._site = snapshot
        self.local_revision += 1
        self._ensure_active_page()
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._site = snapshot
        self.local_revision += 1
        self._ensure_active_page()
        return True
