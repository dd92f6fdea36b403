"""Theme registry mapping section type keys to renderable salon components.

Site configurations list their page sections either as bare keys (``"hero"``)
or as ``{"type": "hero", "props": {...}}`` objects. The registry resolves those
keys against a closed set of components; unknown keys are skipped with a
warning rather than failing the whole page.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from topiko_publisher.models.sections import (
    SectionComponent,
    SectionConfig,
    SectionDefinition,
    SectionType,
)

LOGGER = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
DEFAULT_THEME = "salon"

SECTION_REGISTRY: Mapping[SectionType, SectionComponent] = MappingProxyType(
    {
        SectionType.HERO: SectionComponent(SectionType.HERO, DEFAULT_THEME, "hero.html"),
        SectionType.ABOUT: SectionComponent(SectionType.ABOUT, DEFAULT_THEME, "about.html"),
        SectionType.SERVICES: SectionComponent(SectionType.SERVICES, DEFAULT_THEME, "services.html"),
        SectionType.GALLERY: SectionComponent(SectionType.GALLERY, DEFAULT_THEME, "gallery.html"),
        SectionType.FOOTER: SectionComponent(SectionType.FOOTER, DEFAULT_THEME, "footer.html"),
    }
)

_DEFAULT_SECTIONS: tuple[str, ...] = (
    SectionType.HERO.value,
    SectionType.ABOUT.value,
    SectionType.SERVICES.value,
    SectionType.FOOTER.value,
)


def available_section_types() -> list[str]:
    return [section_type.value for section_type in SECTION_REGISTRY]


def get_section_component(type_key: str) -> SectionComponent | None:
    """Return the component registered for ``type_key`` or ``None``."""

    try:
        section_type = SectionType(type_key)
    except ValueError:
        LOGGER.warning(
            '[Theme Registry] Section type "%s" not found in registry. Available types: %s',
            type_key,
            ", ".join(available_section_types()),
        )
        return None
    return SECTION_REGISTRY[section_type]


def normalize_section_config(section: SectionDefinition) -> SectionConfig:
    """Return ``section`` in its structured ``{"type": ...}`` form."""

    if isinstance(section, str):
        return {"type": section}
    return section


def validate_sections(sections: Iterable[SectionDefinition]) -> list[SectionConfig]:
    """Normalise ``sections`` and drop entries whose type is not registered.

    Order is preserved and duplicates are kept.
    """

    valid: list[SectionConfig] = []
    for section in map(normalize_section_config, sections):
        if not isinstance(section, Mapping):
            LOGGER.warning("[Theme Registry] Skipping malformed section: %r", section)
            continue
        if get_section_component(str(section.get("type", ""))) is None:
            LOGGER.warning("[Theme Registry] Skipping invalid section: %s", section.get("type"))
            continue
        if not isinstance(section.get("props", {}), Mapping):
            LOGGER.warning("[Theme Registry] Skipping section with non-object props: %s", section.get("type"))
            continue
        valid.append(section)
    return valid


def get_default_sections() -> list[SectionDefinition]:
    """Return the fallback section order used when a site lists none."""

    return list(_DEFAULT_SECTIONS)


def resolve_sections(site_config: Mapping[str, Any]) -> list[SectionConfig]:
    """Return the validated sections of ``site_config`` or the default order."""

    declared = site_config.get("sections")
    if not isinstance(declared, Sequence) or isinstance(declared, str) or not declared:
        declared = get_default_sections()
    return validate_sections(declared)


@lru_cache(maxsize=1)
def _template_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_section(section: SectionDefinition, site_config: Mapping[str, Any] | None = None) -> str:
    """Render a single section, returning an empty string for unknown types."""

    config = normalize_section_config(section)
    component = get_section_component(str(config.get("type", "")))
    if component is None:
        return ""
    template = _template_environment().get_template(component.template_path)
    return template.render(component.context(config.get("props"), site_config))


def render_sections(site_config: Mapping[str, Any]) -> str:
    """Render every section declared by ``site_config`` in order."""

    rendered = [render_section(section, site_config) for section in resolve_sections(site_config)]
    return "\n".join(block.strip() for block in rendered if block.strip())


__all__ = [
    "DEFAULT_THEME",
    "SECTION_REGISTRY",
    "available_section_types",
    "get_default_sections",
    "get_section_component",
    "normalize_section_config",
    "render_section",
    "render_sections",
    "resolve_sections",
    "validate_sections",
]
