"""Tests for the section schema registry."""

from __future__ import annotations

import pytest

from pagebuilder.domain.exceptions import SchemaError
from pagebuilder.domain.registry import (
    SCHEMAS,
    field_set,
    get_defaults,
    new_list_item,
    schema_for,
    validate,
)
from pagebuilder.domain.schema import (
    FAQContent,
    FAQItem,
    GalleryPhoto,
    HeroContent,
    MapContent,
    Padding,
    SectionType,
    TextContent,
)


def test_every_section_type_has_a_schema() -> None:
    assert set(SCHEMAS) == set(SectionType)


@pytest.mark.parametrize("section_type", list(SectionType))
def test_defaults_have_fresh_id_and_unset_order(section_type: SectionType) -> None:
    first = get_defaults(section_type)
    second = get_defaults(section_type)

    assert first.id != second.id
    assert first.order is None
    assert first.visible is True
    assert first.type is section_type
    assert isinstance(first.content, schema_for(section_type).content_class)


def test_defaults_accept_string_type_names() -> None:
    section = get_defaults("hero")
    assert section.type is SectionType.HERO
    assert section.style.padding is Padding.LARGE
    assert section.style.background == "primary-blue"


def test_unknown_type_raises_schema_error() -> None:
    with pytest.raises(SchemaError):
        get_defaults("carousel")
    with pytest.raises(SchemaError):
        validate("carousel", HeroContent())


def test_repeatable_sections_get_unique_anchors() -> None:
    a = get_defaults(SectionType.TEXT)
    b = get_defaults(SectionType.TEXT)
    assert a.anchor_id.startswith("text-")
    assert a.anchor_id != b.anchor_id
    assert get_defaults(SectionType.HERO).anchor_id == "hero"


@pytest.mark.parametrize(
    "section_type",
    [t for t in SectionType if t is not SectionType.IMAGE],
)
def test_default_content_is_valid(section_type: SectionType) -> None:
    section = get_defaults(section_type)
    assert validate(section_type, section.content) == []


def test_image_default_requires_source() -> None:
    errors = validate(SectionType.IMAGE, get_defaults(SectionType.IMAGE).content)
    assert [e.field for e in errors] == ["src"]


def test_faq_question_must_not_be_blank() -> None:
    content = FAQContent(items=[FAQItem(question_en="  ", answer_en="<p>Yes</p>")])
    errors = validate(SectionType.FAQ, content)
    assert [e.field for e in errors] == ["items[0].question_en"]


def test_validate_returns_errors_instead_of_raising() -> None:
    errors = validate(SectionType.HERO, HeroContent(heading_en="", variant="diagonal"))
    assert {e.field for e in errors} == {"heading_en", "variant"}


def test_manual_gallery_requires_photo_urls() -> None:
    content = get_defaults(SectionType.GALLERY).content.merged(
        {"mode": "manual", "photos": [GalleryPhoto(url=""), GalleryPhoto(url="/uploads/a.png")]}
    )
    errors = validate(SectionType.GALLERY, content)
    assert [e.field for e in errors] == ["photos[0].url"]


def test_manual_map_requires_coordinates_in_range() -> None:
    content = MapContent(mode="manual", lat=27.7, lng=200.0)
    errors = validate(SectionType.MAP, content)
    assert [e.field for e in errors] == ["lng"]


def test_content_of_wrong_variant_is_a_schema_error() -> None:
    with pytest.raises(SchemaError):
        validate(SectionType.HERO, TextContent())


def test_field_set_leads_with_variant_choice() -> None:
    fields = field_set(SectionType.TEXT)
    assert fields[0].name == "variant"
    assert fields[0].choices == ("standard",)
    assert [f.name for f in fields if f.is_rich_text] == ["body_en", "body_ne"]


def test_new_list_item_builds_typed_items() -> None:
    photo = new_list_item(SectionType.GALLERY, "photos", url="/uploads/x.png", caption_en="Lobby")
    assert isinstance(photo, GalleryPhoto)
    assert photo.id
    assert photo.caption_en == "Lobby"

    with pytest.raises(SchemaError):
        new_list_item(SectionType.HERO, "photos")
