# tests/test_content_resolution.py
# Resolución override -> default, visibilidad y helpers del editor (sin BD)
from __future__ import annotations

from types import SimpleNamespace

from reflet.content_structure import (
    PAGE_CONTENT_STRUCTURE,
    ContentKind,
    default_for,
    get_field,
    iter_fields,
    page_keys,
)
from reflet.services.content_service import (
    PageContent,
    collect_bulk_items,
    editor_values,
    resolve,
    resolve_visibility,
    section_visibility,
)


def _row(section, key, value, id=None):
    return SimpleNamespace(id=id, section=section, content_key=key, content_value=value)


# ---------- resolve ----------
def test_resolve_missing_returns_fallback():
    assert resolve([], "hero", "title", "Ensemble, cultivons") == "Ensemble, cultivons"
    assert resolve([_row("hero", "badge", "x")], "hero", "title", "fb") == "fb"


def test_resolve_never_returns_none():
    assert resolve([], "hero", "title", None) == ""
    assert resolve([_row("hero", "title", None)], "hero", "title", None) == ""


def test_resolve_override_wins():
    rows = [_row("hero", "title", "Nouveau Titre")]
    assert resolve(rows, "hero", "title", "Ensemble, cultivons") == "Nouveau Titre"


def test_resolve_empty_override_falls_back():
    rows = [_row("hero", "title", "")]
    assert resolve(rows, "hero", "title", "Ensemble, cultivons") == "Ensemble, cultivons"


def test_resolve_duplicates_first_match_wins():
    rows = [_row("hero", "title", "premier", id=1), _row("hero", "title", "second", id=2)]
    assert resolve(rows, "hero", "title", "fb") == "premier"


def test_resolve_empty_first_duplicate_still_falls_back():
    # the first match decides, even when it is empty
    rows = [_row("hero", "title", "", id=1), _row("hero", "title", "second", id=2)]
    assert resolve(rows, "hero", "title", "fb") == "fb"


# ---------- visibility ----------
def test_visibility_defaults_to_true():
    assert resolve_visibility([], "newSection") is True
    assert resolve_visibility([_row("hero", "title", "x")], "hero") is True


def test_visibility_sentinel():
    rows = [_row("mission", "_visible", "false"), _row("hero", "_visible", "true")]
    assert resolve_visibility(rows, "mission") is False
    assert resolve_visibility(rows, "hero") is True


def test_section_visibility_covers_every_section():
    vis = section_visibility("accueil", [_row("impact", "_visible", "false")])
    assert set(vis) == set(PAGE_CONTENT_STRUCTURE["accueil"].sections)
    assert vis["impact"] is False
    assert all(v for k, v in vis.items() if k != "impact")
    assert section_visibility("inconnue", []) == {}


# ---------- PageContent ----------
def test_page_content_uses_schema_defaults():
    pc = PageContent("accueil")
    assert pc.get("hero", "title") == "Ensemble, cultivons"
    assert pc.get("hero", "nope") == ""
    assert pc.get("hero", "nope", "explicite") == "explicite"
    assert pc.visible("hero") is True


def test_page_content_overrides_and_sentinel():
    pc = PageContent("accueil", [
        _row("hero", "title", "Nouveau Titre"),
        _row("hero", "title", "ignoré"),
        _row("mission", "title", ""),
        _row("mission", "_visible", "false"),
    ])
    assert pc.get("hero", "title") == "Nouveau Titre"
    assert pc.get("mission", "title") == default_for("accueil", "mission", "title")
    assert pc.visible("mission") is False
    assert len(pc) == 3


# ---------- structure ----------
def test_structure_pages_and_defaults():
    assert page_keys() == list(PAGE_CONTENT_STRUCTURE)
    assert {"accueil", "moyens", "cooperative", "culture", "projets",
            "boutique", "galerie", "contact", "presidente"} <= set(page_keys())
    f = get_field("accueil", "hero", "image")
    assert f is not None and f.kind is ContentKind.image
    assert get_field("accueil", "hero", "nope") is None
    assert get_field("nope", "hero", "title") is None
    assert default_for("nope", "hero", "title") == ""


def test_iter_fields_unknown_page_is_empty():
    assert list(iter_fields("nope")) == []


# ---------- editor helpers ----------
def test_editor_values_mix_overrides_and_defaults():
    values = editor_values("accueil", [_row("hero", "title", "Nouveau Titre")])
    assert values["hero.title"] == "Nouveau Titre"
    assert values["mission.title"] == default_for("accueil", "mission", "title")
    assert len(values) == sum(1 for _ in iter_fields("accueil"))


def test_collect_bulk_items_skips_empty_and_unknown():
    form = {
        "hero.title": "Nouveau Titre",
        "hero.badge": "",
        "hero.image": "https://cdn.refletdugabon.org/hero.webp",
        "mission.description": "<p>Texte</p>",
        "hero.inconnu": "ignoré",
        "_section": "hero",
    }
    items = collect_bulk_items("accueil", form)
    by_key = {(i["section"], i["content_key"]): i for i in items}
    assert set(by_key) == {("hero", "title"), ("hero", "image"), ("mission", "description")}
    assert by_key[("hero", "title")]["content_type"] == "text"
    assert by_key[("hero", "image")]["content_type"] == "image"
    assert by_key[("mission", "description")]["content_type"] == "rich_text"
    assert all(i["page"] == "accueil" for i in items)


def test_collect_bulk_items_keeps_whitespace_values():
    items = collect_bulk_items("accueil", {"hero.title": "  "})
    assert [i["content_value"] for i in items] == ["  "]
