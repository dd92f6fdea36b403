from __future__ import annotations

import pytest

from topiko_publisher.models.sections import SectionType
from topiko_publisher.services import theme_registry
from topiko_publisher.services.theme_registry import (
    SECTION_REGISTRY,
    get_default_sections,
    get_section_component,
    normalize_section_config,
    render_section,
    render_sections,
    resolve_sections,
    validate_sections,
)


def test_registry_covers_every_section_type() -> None:
    assert set(SECTION_REGISTRY) == set(SectionType)
    assert get_section_component("gallery") is SECTION_REGISTRY[SectionType.GALLERY]


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        SECTION_REGISTRY[SectionType.HERO] = SECTION_REGISTRY[SectionType.FOOTER]  # type: ignore[index]


def test_unknown_type_returns_none_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        assert get_section_component("bogus") is None

    assert 'Section type "bogus" not found in registry' in caplog.text
    assert "hero, about, services, gallery, footer" in caplog.text


def test_normalize_treats_strings_and_mappings_alike() -> None:
    assert normalize_section_config("about") == normalize_section_config({"type": "about"}) == {"type": "about"}


def test_normalize_passes_structured_entries_through() -> None:
    section = {"type": "hero", "props": {"title": "Hi"}}

    assert normalize_section_config(section) is section


def test_validate_drops_unknown_types_and_preserves_order(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        valid = validate_sections(["hero", {"type": "bogus"}, "footer"])

    assert valid == [{"type": "hero"}, {"type": "footer"}]
    assert "Skipping invalid section: bogus" in caplog.text


def test_validate_keeps_duplicates() -> None:
    assert validate_sections(["hero", "hero", {"type": "about", "props": {"text": "x"}}]) == [
        {"type": "hero"},
        {"type": "hero"},
        {"type": "about", "props": {"text": "x"}},
    ]


def test_validate_skips_malformed_entries() -> None:
    assert validate_sections([{"props": {}}, 3, "gallery"]) == [{"type": "gallery"}]  # type: ignore[list-item]


def test_validate_skips_sections_with_non_object_props(caplog: pytest.LogCaptureFixture) -> None:
    sections = [{"type": "hero", "props": "x"}, {"type": "about", "props": {"text": "x"}}]

    with caplog.at_level("WARNING"):
        valid = validate_sections(sections)  # type: ignore[arg-type]

    assert valid == [{"type": "about", "props": {"text": "x"}}]
    assert "non-object props" in caplog.text


def test_default_sections_are_a_fresh_four_element_list() -> None:
    defaults = get_default_sections()
    defaults.append("gallery")

    assert get_default_sections() == ["hero", "about", "services", "footer"]


@pytest.mark.parametrize("sections", [None, [], "hero"])
def test_resolve_falls_back_to_default_order(sections: object) -> None:
    config = {} if sections is None else {"sections": sections}

    resolved = resolve_sections(config)

    assert [section["type"] for section in resolved] == ["hero", "about", "services", "footer"]


def test_resolve_uses_declared_sections() -> None:
    assert resolve_sections({"sections": ["gallery", "bogus"]}) == [{"type": "gallery"}]


def test_render_section_uses_props_and_site_config() -> None:
    html = render_section({"type": "hero", "props": {"subtitle": "Cuts & colour"}}, {"name": "Acme <Salon>"})

    assert '<section class="hero">' in html
    assert "Acme &lt;Salon&gt;" in html
    assert "Cuts &amp; colour" in html


def test_render_section_ignores_non_object_props() -> None:
    html = render_section({"type": "hero", "props": "x"}, {"name": "Acme"})  # type: ignore[typeddict-item]

    assert "<h1>Acme</h1>" in html


def test_render_services_lists_items_from_props() -> None:
    html = render_section(
        {"type": "services", "props": {"items": [{"name": "Colour", "price": "€60"}, "Trim"]}},
        {"services": [{"name": "Ignored"}]},
    )

    assert "Colour" in html
    assert "€60" in html
    assert "Trim" in html
    assert "Ignored" not in html


def test_render_sections_with_default_order_includes_services() -> None:
    html = render_sections({"name": "Acme", "services": ["Cut"]})

    assert '<section class="services">' in html
    assert "Cut" in html


def test_render_section_returns_empty_string_for_unknown_type() -> None:
    assert render_section("bogus") == ""


def test_render_sections_renders_in_declared_order() -> None:
    config = {
        "name": "Acme",
        "services": [{"name": "Cut", "price": "€25"}, "Blow dry"],
        "sections": ["footer", {"type": "services", "props": {"title": "Menu"}}],
    }

    html = render_sections(config)

    assert html.index('<footer class="footer">') < html.index('<section class="services">')
    assert "Menu" in html
    assert "€25" in html
    assert "Blow dry" in html


def test_templates_exist_for_every_component() -> None:
    for component in SECTION_REGISTRY.values():
        assert (theme_registry.TEMPLATE_DIR / component.template_path).is_file()
