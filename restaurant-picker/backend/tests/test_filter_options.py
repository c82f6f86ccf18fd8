from __future__ import annotations

from types import SimpleNamespace

from models import FilterSelection
from services.filter_options import resolve_from_store, resolve_options
from services.restaurant_store import add_restaurant


def _row(county: str, area: str, cuisine: str) -> SimpleNamespace:
    return SimpleNamespace(county=county, area=area, cuisine=cuisine)


ROWS = [
    _row("LA", "Ktown", "Korean"),
    _row("LA", "Ktown", "Chinese"),
    _row("LA", "Silverlake", "Thai"),
    _row("OC", "Irvine", "Korean"),
    _row("OC", "Irvine", "Taiwanese"),
]


def test_no_selection_offers_everything() -> None:
    opts = resolve_options(ROWS, FilterSelection())
    assert opts.counties == ["LA", "OC"]
    assert opts.areas == ["Irvine", "Ktown", "Silverlake"]
    assert opts.cuisines == ["Chinese", "Korean", "Taiwanese", "Thai"]


def test_county_change_drops_stale_area_and_cuisine() -> None:
    # user had LA/Ktown/Chinese selected, then switched county to OC
    sel = FilterSelection(counties=["OC"], areas=["Ktown", "Irvine"], cuisines=["Chinese", "Korean"])
    opts = resolve_options(ROWS, sel)

    assert opts.areas == ["Irvine"]
    assert opts.selected.areas == ["Irvine"]
    assert opts.cuisines == ["Korean", "Taiwanese"]
    assert opts.selected.cuisines == ["Korean"]
    assert opts.selected.counties == ["OC"]


def test_area_narrows_cuisines() -> None:
    opts = resolve_options(ROWS, FilterSelection(counties=["LA"], areas=["Silverlake"], cuisines=["Korean"]))
    assert opts.cuisines == ["Thai"]
    assert opts.selected.cuisines == []


def test_to_dict_shape() -> None:
    data = resolve_options(ROWS, FilterSelection(counties=["LA"])).to_dict()
    assert set(data) == {"counties", "areas", "cuisines", "selected"}
    assert data["selected"] == {"counties": ["LA"], "areas": [], "cuisines": []}


def test_resolve_from_store(db_session, cfg) -> None:
    add_restaurant(db_session, cfg, {"name": "MDK", "county": "LA", "area": "Ktown", "cuisine": "Korean"})
    add_restaurant(db_session, cfg, {"name": "Tofu House", "county": "OC", "area": "Irvine", "cuisine": "Korean"})

    opts = resolve_from_store(db_session, FilterSelection(counties=["OC"], areas=["Ktown"]))
    assert opts.areas == ["Irvine"]
    assert opts.selected.areas == []
    assert opts.cuisines == ["Korean"]
