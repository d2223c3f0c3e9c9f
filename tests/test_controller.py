"""Tests for the section editor controller."""

from __future__ import annotations

import pytest

from pagebuilder.domain.exceptions import SchemaError, SectionNotFound
from pagebuilder.domain.schema import SectionType
from pagebuilder.editor.controller import SectionEditorController
from pagebuilder.editor.session import EditingSession


@pytest.fixture()
def session() -> EditingSession:
    return EditingSession("clinic-1")


@pytest.fixture()
def controller(session: EditingSession) -> SectionEditorController:
    return SectionEditorController(session, debounce_seconds=0.3, clock=lambda: 0.0)


def test_keystrokes_commit_once_after_pause(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)

    for index, text in enumerate(["C", "Cl", "Cli", "Clinic"]):
        controller.edit_field("heading_en", text, now=index * 0.1)

    assert controller.value("heading_en") == "Clinic"
    assert controller.tick(now=0.35) is False
    assert session.local_revision == 1

    assert controller.tick(now=0.7) is True
    assert session.local_revision == 2
    assert session.get_section(hero.id).content.heading_en == "Clinic"


def test_deselect_flushes_pending_edit(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)
    controller.edit_field("subheading_en", "Open daily", now=0.0)

    controller.deselect()

    assert controller.selected_section_id is None
    assert session.get_section(hero.id).content.subheading_en == "Open daily"


def test_pending_edit_follows_its_section_across_pages(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    home_id = session.active_page.id
    controller.select(hero.id)
    controller.edit_field("heading_en", "Welcome", now=0.0)

    session.create_page("about", "About")
    controller.deselect()

    assert session.site.get_page(home_id).get_section(hero.id).content.heading_en == "Welcome"
    assert session.active_page.slug == "about"
    assert session.active_page.sections == []


def test_selection_survives_switching_page(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)
    session.create_page_from_template("contact")

    controller.edit_style(background="#112233")
    controller.edit_field("heading_en", "Welcome", now=0.0)
    controller.blur()

    section = session.site.home.get_section(hero.id)
    assert (section.style.background, section.content.heading_en) == ("#112233", "Welcome")
    assert controller.selected_section_id == hero.id

    controller.remove_selected()
    assert session.site.home.sections == []
    assert session.active_page.slug == "contact"


def test_unchanged_value_is_not_committed(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)

    controller.edit_field("heading_en", hero.content.heading_en, now=0.0)
    controller.deselect()

    assert session.local_revision == 1
    assert len(session.history) == 2


def test_selecting_another_section_flushes_first(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    text = session.add_section(SectionType.TEXT)
    controller.select(hero.id)
    controller.edit_field("heading_en", "Welcome", now=0.0)

    controller.select(text.id)

    assert session.get_section(hero.id).content.heading_en == "Welcome"
    assert controller.pending is None
    assert session.local_revision == 3


def test_rich_text_is_normalized(session: EditingSession, controller: SectionEditorController) -> None:
    text = session.add_section(SectionType.TEXT)
    controller.select(text.id)

    controller.edit_rich_text("body_en", "<div><b>Hours</b><script>x()</script></div><p></p>", now=0.0)
    controller.blur()

    assert session.get_section(text.id).content.body_en == "<strong>Hours</strong>"
    with pytest.raises(SchemaError):
        controller.edit_rich_text("heading_en", "<p>x</p>")


def test_gallery_items_commit_individually(session: EditingSession, controller: SectionEditorController) -> None:
    gallery = session.add_section(SectionType.GALLERY)
    controller.select(gallery.id)

    controller.add_item("photos", url="/uploads/a.png")
    controller.add_item("photos", url="/uploads/b.png")
    photos = session.get_section(gallery.id).content.photos
    assert [p.url for p in photos] == ["/uploads/a.png", "/uploads/b.png"]
    assert session.local_revision == 3

    controller.move_item("photos", photos[1].id, "up")
    controller.remove_item("photos", photos[0].id)

    remaining = session.get_section(gallery.id).content.photos
    assert [p.url for p in remaining] == ["/uploads/b.png"]
    assert session.local_revision == 5


def test_item_edits_are_buffered(session: EditingSession, controller: SectionEditorController) -> None:
    gallery = session.add_section(SectionType.GALLERY)
    controller.select(gallery.id)
    controller.add_item("photos", url="/uploads/a.png")
    photo_id = session.get_section(gallery.id).content.photos[0].id

    controller.edit_item("photos", photo_id, now=1.0, caption_en="Lobby")
    controller.edit_item("photos", photo_id, now=1.1, caption_ne="लबी")
    assert session.get_section(gallery.id).content.photos[0].caption_en == ""

    controller.tick(now=2.0)
    photo = session.get_section(gallery.id).content.photos[0]
    assert (photo.caption_en, photo.caption_ne) == ("Lobby", "लबी")

    with pytest.raises(SchemaError):
        controller.edit_item("photos", photo_id, colour="red")


def test_stale_selection_raises_and_clears(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)
    session.remove_section(hero.id)

    with pytest.raises(SectionNotFound):
        controller.edit_field("heading_en", "Gone")

    assert controller.selected_section_id is None
    assert controller.fields() == ()


def test_undo_flushes_pending_edit_first(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    original = hero.content.heading_en
    controller.select(hero.id)
    controller.edit_field("heading_en", "Draft", now=0.0)

    assert controller.undo() is True

    assert session.get_section(hero.id).content.heading_en == original
    assert session.can_redo
    assert controller.selected_section_id == hero.id


def test_undo_of_section_creation_drops_selection(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)

    controller.undo()

    assert controller.selected_section_id is None


def test_field_lookup(session: EditingSession, controller: SectionEditorController) -> None:
    assert controller.fields() == ()

    gallery = session.add_section(SectionType.GALLERY)
    controller.select(gallery.id)

    names = [spec.name for spec in controller.fields()]
    assert names[0] == "variant"
    assert "photos" in names

    with pytest.raises(SchemaError):
        controller.edit_field("subtitle", "x")
    with pytest.raises(SchemaError):
        controller.edit_field("photos", [])


def test_style_edits_and_removal(session: EditingSession, controller: SectionEditorController) -> None:
    hero = session.add_section(SectionType.HERO)
    controller.select(hero.id)

    controller.edit_style(background="#112233", padding="small")
    assert session.get_section(hero.id).style.background == "#112233"

    controller.remove_selected()
    assert controller.selected_section_id is None
    assert session.active_page.sections == []
