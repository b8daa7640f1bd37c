"""BeerXML 1.0 import and export.

BeerXML units are converted to the ones ``brewcalc.models`` expects:
yields (percent of sucrose) become PPG, gravities (1.050) become thousand
scale (1050.0), and the evaporation rate (percent of boil size per hour)
becomes liters per hour. Grain loss has no BeerXML field; parsed recipes
use the default.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import TypeVar

from lxml import etree

from brewcalc.models import (
    Fermentable,
    FermentableType,
    Hop,
    HopUse,
    ProcessStep,
    Recipe,
    Settings,
    Yeast,
    points_to_sg,
    sg_to_points,
    yield_to_ppg,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class BeerXMLError(ValueError):
    """Content that is not a BeerXML recipe document."""


# === Parsing ===


def _text(element: etree._Element, tag: str) -> str:
    return (element.findtext(tag) or "").strip()


def _optional_number(element: etree._Element, tag: str) -> float | None:
    """Read a numeric field, or None when it is absent or empty."""
    text = _text(element, tag)
    if not text:
        return None
    try:
        return float(text)
    except ValueError as e:
        raise BeerXMLError(f"{element.tag}/{tag}: not a number: {text!r}") from e


def _number(element: etree._Element, tag: str, default: float = 0.0) -> float:
    value = _optional_number(element, tag)
    return default if value is None else value


def _choice(element: etree._Element, tag: str, enum: type[E], default: E) -> E:
    """Match a BeerXML enumeration value case-insensitively."""
    text = _text(element, tag)
    for member in enum:
        if member.value.lower() == text.lower():
            return member
    if text:
        logger.warning("Unknown %s %r, using %r", tag, text, default.value)
    return default


def _gravity(element: etree._Element, tag: str) -> float | None:
    # BeerXML writes 0 or nothing for a gravity that was not measured
    sg = _number(element, tag)
    return sg_to_points(sg) if sg else None


def _parse_fermentable(element: etree._Element) -> Fermentable:
    return Fermentable.model_validate({
        "name": _text(element, "NAME"),
        "type": _choice(element, "TYPE", FermentableType, FermentableType.GRAIN),
        "color": _number(element, "COLOR"),
        "potential": yield_to_ppg(_number(element, "YIELD")),
        "amount": _number(element, "AMOUNT"),
    })


def _parse_hop(element: etree._Element) -> Hop:
    return Hop.model_validate({
        "name": _text(element, "NAME"),
        "alpha": _number(element, "ALPHA"),
        "amount": _number(element, "AMOUNT"),
        "time": _number(element, "TIME"),
        "use": _choice(element, "USE", HopUse, HopUse.BOIL),
    })


def _parse_yeast(element: etree._Element) -> Yeast:
    return Yeast.model_validate({
        "name": _text(element, "NAME"),
        "attenuation": _number(element, "ATTENUATION"),
        "amount": _number(element, "AMOUNT", default=1.0),
    })


def _parse_step(element: etree._Element) -> ProcessStep:
    return ProcessStep.model_validate({
        "name": _text(element, "NAME"),
        "temperature": _number(element, "STEP_TEMP"),
        "duration": _number(element, "STEP_TIME"),
        "ramp_time": _number(element, "RAMP_TIME"),
    })


def _parse_settings(recipe_elem: etree._Element, batch_size: float) -> Settings:
    defaults = Settings()
    efficiency = _number(recipe_elem, "EFFICIENCY", default=defaults.efficiency)

    evaporation_rate = defaults.evaporation_rate
    equipment = recipe_elem.find("EQUIPMENT")
    if equipment is not None:
        evap_pct = _optional_number(equipment, "EVAP_RATE")
        if evap_pct is not None:
            # A percent of a zero boil size carries no rate
            boil_size = (
                _number(equipment, "BOIL_SIZE")
                or _number(recipe_elem, "BOIL_SIZE")
                or batch_size
            )
            evaporation_rate = evap_pct / 100 * boil_size

    return Settings(efficiency=efficiency, evaporation_rate=evaporation_rate)


def _parse_recipe(element: etree._Element) -> Recipe:
    """Parse a single RECIPE element into a Recipe object."""
    batch_size = _number(element, "BATCH_SIZE")
    recipe = Recipe.model_validate({
        "name": _text(element, "NAME"),
        "description": _text(element, "NOTES"),
        "target_volume": batch_size,
        "settings": _parse_settings(element, batch_size),
        "original_gravity_measured": _gravity(element, "OG"),
        "final_gravity_measured": _gravity(element, "FG"),
    })

    recipe.fermentables.extend(
        _parse_fermentable(e) for e in element.iterfind("FERMENTABLES/FERMENTABLE")
    )
    recipe.hops.extend(_parse_hop(e) for e in element.iterfind("HOPS/HOP"))
    recipe.yeasts.extend(_parse_yeast(e) for e in element.iterfind("YEASTS/YEAST"))
    recipe.steps.extend(
        _parse_step(e) for e in element.iterfind("MASH/MASH_STEPS/MASH_STEP")
    )

    logger.debug(
        "Parsed recipe %r: %d fermentables, %d hops, %d yeasts, %d steps",
        recipe.name, len(recipe.fermentables), len(recipe.hops),
        len(recipe.yeasts), len(recipe.steps),
    )
    return recipe


def parse_recipes(content: str | bytes) -> list[Recipe]:
    """Parse every recipe of a BeerXML document."""
    parser_options = {"remove_blank_text": True, "resolve_entities": False}
    if isinstance(content, str):
        # Already decoded, so any declared encoding no longer applies
        content = content.encode("utf-8")
        parser_options["encoding"] = "utf-8"

    try:
        parser = etree.XMLParser(**parser_options)
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as e:
        raise BeerXMLError(f"Malformed BeerXML: {e}") from e

    if root.tag == "RECIPES":
        elements = root.findall("RECIPE")
    elif root.tag == "RECIPE":
        elements = [root]
    else:
        raise BeerXMLError(f"Expected RECIPES or RECIPE root, got {root.tag}")

    return [_parse_recipe(e) for e in elements]


def load_recipes(path: str | Path) -> list[Recipe]:
    """Read and parse a BeerXML file."""
    return parse_recipes(Path(path).read_bytes())


# === Export ===


def _add(parent: etree._Element, tag: str, value) -> etree._Element:
    child = etree.SubElement(parent, tag)
    if isinstance(value, Enum):
        child.text = value.value
    elif isinstance(value, float):
        child.text = repr(value)
    else:
        child.text = str(value)
    return child


def _record(parent: etree._Element, tag: str, fields: dict) -> etree._Element:
    element = etree.SubElement(parent, tag)
    _add(element, "NAME", fields.pop("NAME"))
    _add(element, "VERSION", 1)
    for name, value in fields.items():
        _add(element, name, value)
    return element


def _export_recipe(parent: etree._Element, recipe: Recipe) -> None:
    boil_time = max((h.time for h in recipe.hops if h.contributes_bitterness), default=0.0)
    element = _record(parent, "RECIPE", {
        "NAME": recipe.name,
        "TYPE": "All Grain",
        "BREWER": "",
        "BATCH_SIZE": float(recipe.target_volume),
        "BOIL_SIZE": float(recipe.target_volume),
        "BOIL_TIME": float(boil_time),
        "EFFICIENCY": float(recipe.settings.efficiency),
    })
    if recipe.description:
        _add(element, "NOTES", recipe.description)
    if recipe.original_gravity_measured is not None:
        _add(element, "OG", points_to_sg(recipe.original_gravity_measured))
    if recipe.final_gravity_measured is not None:
        _add(element, "FG", points_to_sg(recipe.final_gravity_measured))

    # Evaporation is a percentage of the boil size, here the batch size.
    # A zero batch gets a nominal 1 L boil so the rate still survives.
    boil_size = float(recipe.target_volume) or 1.0
    _record(element, "EQUIPMENT", {
        "NAME": recipe.name,
        "BOIL_SIZE": boil_size,
        "BATCH_SIZE": float(recipe.target_volume),
        "EVAP_RATE": recipe.settings.evaporation_rate / boil_size * 100,
    })

    hops = etree.SubElement(element, "HOPS")
    for h in recipe.hops:
        _record(hops, "HOP", {
            "NAME": h.name,
            "ALPHA": float(h.alpha),
            "AMOUNT": float(h.amount),
            "USE": h.use,
            "TIME": float(h.time),
        })

    fermentables = etree.SubElement(element, "FERMENTABLES")
    for f in recipe.fermentables:
        _record(fermentables, "FERMENTABLE", {
            "NAME": f.name,
            "TYPE": f.type,
            "AMOUNT": float(f.amount),
            "YIELD": f.yield_pct,
            "COLOR": float(f.color),
        })

    etree.SubElement(element, "MISCS")

    yeasts = etree.SubElement(element, "YEASTS")
    for y in recipe.yeasts:
        _record(yeasts, "YEAST", {
            "NAME": y.name,
            "TYPE": "Ale",
            "FORM": "Liquid",
            "AMOUNT": float(y.amount),
            "ATTENUATION": float(y.attenuation),
        })

    etree.SubElement(element, "WATERS")

    if recipe.steps:
        mash = _record(element, "MASH", {
            "NAME": recipe.name,
            "GRAIN_TEMP": float(recipe.steps[0].temperature),
        })
        steps = etree.SubElement(mash, "MASH_STEPS")
        for s in recipe.steps:
            _record(steps, "MASH_STEP", {
                "NAME": s.name,
                "TYPE": "Infusion",
                "STEP_TEMP": float(s.temperature),
                "STEP_TIME": float(s.duration),
                "RAMP_TIME": float(s.ramp_time),
            })


def export_recipes(recipes: list[Recipe]) -> str:
    """Export recipes as a BeerXML 1.0 document."""
    root = etree.Element("RECIPES")
    for recipe in recipes:
        _export_recipe(root, recipe)
    return etree.tostring(
        root, pretty_print=True, xml_declaration=True, encoding="UTF-8"
    ).decode("utf-8")
