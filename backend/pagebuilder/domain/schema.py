"""
Section types, style properties and the per-type content payloads.

Content is a closed tagged union: ``SECTION_CONTENT`` maps every
``SectionType`` to exactly one dataclass. Localised copy is stored as
``<field>_en`` / ``<field>_ne`` pairs.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

from .exceptions import SchemaError


class SectionType(str, Enum):
    HERO = "hero"
    TEXT = "text"
    SERVICES = "services"
    DOCTORS = "doctors"
    GALLERY = "gallery"
    CONTACT = "contact"
    REVIEWS = "reviews"
    FAQ = "faq"
    BOOKING = "booking"
    OPD = "opd"
    MAP = "map"
    DIVIDER = "divider"
    BUTTON = "button"
    IMAGE = "image"

    @classmethod
    def coerce(cls, value: "SectionType | str") -> "SectionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError) as exc:
            raise SchemaError(f"Unknown section type: {value!r}") from exc


class Padding(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Layout(str, Enum):
    FULL = "full"
    CONTAINED = "contained"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


AUTO = "auto"
MANUAL = "manual"
DATA_MODES = (AUTO, MANUAL)

DESIGN_TOKENS = (
    "white",
    "background",
    "primary-blue",
    "primary-red",
    "primary-yellow",
    "foreground",
    "muted",
)


def new_id() -> str:
    return str(uuid.uuid4())


# ------------------------
# Style
# ------------------------

@dataclass
class StyleProps:
    background: str = "white"
    text_color: str = "foreground"
    padding: Padding = Padding.MEDIUM
    layout: Layout = Layout.CONTAINED

    def to_dict(self) -> Dict[str, str]:
        return {
            "background": self.background,
            "text_color": self.text_color,
            "padding": self.padding.value,
            "layout": self.layout.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "StyleProps":
        data = data or {}
        if not isinstance(data, Mapping):
            raise SchemaError("Section style must be an object")
        try:
            return cls(
                background=data.get("background", "white"),
                text_color=data.get("text_color", "foreground"),
                padding=Padding(data.get("padding", Padding.MEDIUM.value)),
                layout=Layout(data.get("layout", Layout.CONTAINED.value)),
            )
        except ValueError as exc:
            raise SchemaError(f"Invalid style: {exc}") from exc


# ------------------------
# List items
# ------------------------

@dataclass
class Item:
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, data: "Mapping[str, Any] | Item") -> "Item":
        if isinstance(data, cls):
            return copy.deepcopy(data)
        if not isinstance(data, Mapping):
            raise SchemaError(f"{cls.__name__} must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        if not values.get("id"):
            values.pop("id", None)
        return cls(**values)


@dataclass
class ServiceItem(Item):
    name_en: str = ""
    name_ne: str = ""
    description_en: str = ""
    description_ne: str = ""
    icon: str = ""


@dataclass
class GalleryPhoto(Item):
    url: str = ""
    caption_en: str = ""
    caption_ne: str = ""


@dataclass
class FAQItem(Item):
    question_en: str = ""
    question_ne: str = ""
    answer_en: str = ""
    answer_ne: str = ""


@dataclass
class ButtonItem(Item):
    label_en: str = ""
    label_ne: str = ""
    href: str = ""
    open_in_new_tab: bool = False
    color: str = "primary-blue"
    style: str = "solid"


# ------------------------
# Content payloads
# ------------------------

@dataclass
class Content:
    # list field name -> item class
    ITEM_TYPES: ClassVar[Dict[str, Type[Item]]] = {}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def unknown_keys(cls, data: Mapping[str, Any]) -> List[str]:
        known = set(cls.field_names())
        return sorted(k for k in data if k not in known)

    @classmethod
    def coerce_value(cls, name: str, value: Any) -> Any:
        item_cls = cls.ITEM_TYPES.get(name)
        if item_cls is None:
            return copy.deepcopy(value)
        if not isinstance(value, list):
            raise SchemaError(f"{cls.__name__}.{name} must be a list")
        return [item_cls.from_dict(v) for v in value]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Content":
        """Build content from stored JSON. Unknown keys are ignored."""
        data = data or {}
        if not isinstance(data, Mapping):
            raise SchemaError(f"{cls.__name__} must be an object")
        values = {
            name: cls.coerce_value(name, data[name])
            for name in cls.field_names()
            if name in data
        }
        return cls(**values)

    def merged(self, patch: Mapping[str, Any]) -> "Content":
        """Return a copy with ``patch`` shallow-merged in. Keys must be known."""
        unknown = self.unknown_keys(patch)
        if unknown:
            raise SchemaError(f"Unknown fields for {type(self).__name__}: {', '.join(unknown)}")
        clone = copy.deepcopy(self)
        for name, value in patch.items():
            setattr(clone, name, self.coerce_value(name, value))
        return clone


@dataclass
class HeroContent(Content):
    variant: str = "centered"
    heading_en: str = "Welcome to Our Clinic"
    heading_ne: str = "हाम्रो क्लिनिकमा स्वागत छ"
    subheading_en: str = "Quality healthcare you can trust"
    subheading_ne: str = "विश्वसनीय गुणस्तरीय स्वास्थ्य सेवा"
    image: Optional[str] = None
    show_logo: bool = True


@dataclass
class TextContent(Content):
    variant: str = "standard"
    heading_en: str = "About Us"
    heading_ne: str = "हाम्रो बारेमा"
    body_en: str = "<p>Tell your patients about your clinic, your mission, and what makes you different.</p>"
    body_ne: str = "<p>आफ्नो क्लिनिक, आफ्नो मिशन, र तपाईंलाई फरक बनाउने कुराहरूको बारेमा बिरामीहरूलाई बताउनुहोस्।</p>"


@dataclass
class ServicesContent(Content):
    ITEM_TYPES: ClassVar[Dict[str, Type[Item]]] = {"services": ServiceItem}

    variant: str = "cards"
    heading_en: str = "Our Services"
    heading_ne: str = "हाम्रा सेवाहरू"
    mode: str = AUTO
    columns: int = 3
    services: List[ServiceItem] = field(default_factory=list)


@dataclass
class DoctorsContent(Content):
    variant: str = "cards"
    heading_en: str = "Our Medical Team"
    heading_ne: str = "हाम्रो चिकित्सा टोली"
    mode: str = AUTO
    columns: int = 3
    show_specialty: bool = True
    show_degree: bool = True
    show_role: bool = True


@dataclass
class GalleryContent(Content):
    ITEM_TYPES: ClassVar[Dict[str, Type[Item]]] = {"photos": GalleryPhoto}

    variant: str = "grid"
    heading_en: str = "Photo Gallery"
    heading_ne: str = "फोटो ग्यालेरी"
    mode: str = AUTO
    columns: int = 3
    photos: List[GalleryPhoto] = field(default_factory=list)


@dataclass
class ContactContent(Content):
    variant: str = "list"
    heading_en: str = "Contact Us"
    heading_ne: str = "सम्पर्क गर्नुहोस्"
    mode: str = AUTO
    show_phone: bool = True
    show_email: bool = True
    show_address: bool = True
    show_website: bool = True
    show_hours: bool = True


@dataclass
class ReviewsContent(Content):
    variant: str = "cards"
    heading_en: str = "Patient Reviews"
    heading_ne: str = "बिरामी समीक्षाहरू"
    mode: str = AUTO
    max_count: int = 6


def _default_faq_items() -> List[FAQItem]:
    return [
        FAQItem(
            question_en="What are your opening hours?",
            question_ne="तपाईंको खुल्ने समय के हो?",
            answer_en="<p>Please check our contact section for detailed operating hours.</p>",
            answer_ne="<p>कृपया विस्तृत खुल्ने समयको लागि हाम्रो सम्पर्क खण्ड हेर्नुहोस्।</p>",
        )
    ]


@dataclass
class FAQContent(Content):
    ITEM_TYPES: ClassVar[Dict[str, Type[Item]]] = {"items": FAQItem}

    variant: str = "accordion"
    heading_en: str = "Frequently Asked Questions"
    heading_ne: str = "बारम्बार सोधिने प्रश्नहरू"
    items: List[FAQItem] = field(default_factory=_default_faq_items)


@dataclass
class BookingContent(Content):
    variant: str = "standard"
    heading_en: str = "Book an Appointment"
    heading_ne: str = "अपोइन्टमेन्ट बुक गर्नुहोस्"


@dataclass
class OPDContent(Content):
    variant: str = "table"
    heading_en: str = "OPD Schedule"
    heading_ne: str = "OPD तालिका"


@dataclass
class MapContent(Content):
    variant: str = "standard"
    heading_en: str = "Find Us"
    heading_ne: str = "हामीलाई खोज्नुहोस्"
    mode: str = AUTO
    lat: Optional[float] = None
    lng: Optional[float] = None
    zoom: int = 15
    height: int = 400


@dataclass
class DividerContent(Content):
    variant: str = "line"
    thickness: int = 2
    color: str = "foreground"
    width: str = "full"


def _default_buttons() -> List[ButtonItem]:
    return [ButtonItem(label_en="Click Here", label_ne="यहाँ क्लिक गर्नुहोस्", href="#")]


@dataclass
class ButtonContent(Content):
    ITEM_TYPES: ClassVar[Dict[str, Type[Item]]] = {"buttons": ButtonItem}

    variant: str = "row"
    size: str = "md"
    alignment: str = "center"
    gap: str = "md"
    buttons: List[ButtonItem] = field(default_factory=_default_buttons)


@dataclass
class ImageContent(Content):
    variant: str = "standard"
    src: Optional[str] = None
    alt_en: str = ""
    alt_ne: str = ""
    caption_en: str = ""
    caption_ne: str = ""
    href: str = ""


SECTION_CONTENT: Dict[SectionType, Type[Content]] = {
    SectionType.HERO: HeroContent,
    SectionType.TEXT: TextContent,
    SectionType.SERVICES: ServicesContent,
    SectionType.DOCTORS: DoctorsContent,
    SectionType.GALLERY: GalleryContent,
    SectionType.CONTACT: ContactContent,
    SectionType.REVIEWS: ReviewsContent,
    SectionType.FAQ: FAQContent,
    SectionType.BOOKING: BookingContent,
    SectionType.OPD: OPDContent,
    SectionType.MAP: MapContent,
    SectionType.DIVIDER: DividerContent,
    SectionType.BUTTON: ButtonContent,
    SectionType.IMAGE: ImageContent,
}


def content_class(section_type: SectionType | str) -> Type[Content]:
    return SECTION_CONTENT[SectionType.coerce(section_type)]
