"""Types describing page sections declared in a site configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, NotRequired, TypedDict, Union


class SectionType(str, Enum):
    """Closed set of section kinds the salon theme knows how to render."""

    HERO = "hero"
    ABOUT = "about"
    SERVICES = "services"
    GALLERY = "gallery"
    FOOTER = "footer"


class SectionConfig(TypedDict):
    """Structured section entry: a type key plus optional component props."""

    type: str
    props: NotRequired[dict[str, Any]]


SectionDefinition = Union[str, SectionConfig]


@dataclass(frozen=True, slots=True)
class SectionComponent:
    """A renderable UI component bound to a theme template."""

    section_type: SectionType
    theme: str
    template: str

    @property
    def template_path(self) -> str:
        return f"themes/{self.theme}/{self.template}"

    def context(self, props: Mapping[str, Any] | None, site: Mapping[str, Any] | None) -> dict[str, Any]:
        props = props if isinstance(props, Mapping) else {}
        return {"props": dict(props), "site": dict(site or {}), "section": self.section_type.value}
