# Copyright © 2024 Technology Matters
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see https://www.gnu.org/licenses/.

"""
Read and write soils as APSoil XML documents: a `<folder>` of `<Soil name="...">` elements,
each holding `<Water>` (with one `<SoilCrop name="...">` per crop), `<SoilWater>`,
`<SoilOrganicMatter>` and `<Analysis>`. Layered values are written as lists of `<double>` or
`<string>` items.
"""

# Standard libraries
import math
import xml.etree.ElementTree as ET
from dataclasses import fields
from typing import List, Optional

# local libraries
from .errors import InvalidProfileError, SerializationError
from .models import CHILD_TABLES, Soil, SoilCrop, Water, is_layered

FOLDER_VERSION = "36"


def _format_number(value):
    # Integral values are written without a trailing ".0"; everything else uses repr, which
    # reads back to the identical float.
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _parse_number(text, tag):
    try:
        return float(text)
    except (TypeError, ValueError) as err:
        raise SerializationError(f"<{tag}> holds '{text}', expected a number") from err


###################################################################################################
#                                          Writing                                                #
###################################################################################################
def _write_layers(parent, tag, values, item_tag):
    element = ET.SubElement(parent, tag)
    for value in values:
        item = ET.SubElement(element, item_tag)
        if value is not None:
            item.text = value if item_tag == "string" else _format_number(value)


def _write_record(element, record):
    for f in fields(record):
        tag = f.metadata["tag"]
        value = getattr(record, f.name)

        if f.name == "name":
            element.set("name", value)
        elif f.name in CHILD_TABLES:
            _write_record(ET.SubElement(element, tag), value)
        elif f.name == "crops":
            for crop in value.values():
                crop_element = ET.SubElement(element, tag)
                if record.thickness:
                    _write_layers(crop_element, "Thickness", record.thickness, "double")
                _write_record(crop_element, crop)
        elif is_layered(f):
            if value:
                _write_layers(element, tag, value, "string" if f.type == List[str] else "double")
        elif value is not None:
            sub = ET.SubElement(element, tag)
            sub.text = _format_number(value) if isinstance(value, float) else str(value)


def _soil_element(soil):
    element = ET.Element("Soil")
    _write_record(element, soil)
    return element


def _to_text(element):
    ET.indent(element)
    return ET.tostring(element, encoding="unicode")


def soil_to_xml(soil: Soil) -> str:
    """Serialize one soil as a `<Soil>` document."""
    return _to_text(_soil_element(soil))


def soils_to_xml(soils, name="Soils") -> str:
    """Serialize soils, in order, as a `<folder>` document."""
    folder = ET.Element("folder", {"version": FOLDER_VERSION, "name": name})
    for soil in soils:
        folder.append(_soil_element(soil))
    return _to_text(folder)


###################################################################################################
#                                          Reading                                                #
###################################################################################################
def _read_layers(element, tag, strings):
    values = []
    for item in element:
        if strings:
            values.append(item.text)
        else:
            values.append(_parse_number(item.text, tag))
    return values


def _read_record(cls, element):
    kwargs = {}
    for f in fields(cls):
        tag = f.metadata["tag"]

        if f.name == "name":
            kwargs["name"] = element.get("name")
            if not kwargs["name"]:
                raise SerializationError(f"<{element.tag}> has no name attribute")
            continue

        if f.name == "crops":
            kwargs["crops"] = [
                _read_crop(crop_element, kwargs.get("thickness", []))
                for crop_element in element.findall(tag)
            ]
            continue

        child = element.find(tag)
        if child is None:
            continue
        if f.name in CHILD_TABLES:
            kwargs[f.name] = _read_record(CHILD_TABLES[f.name], child)
        elif is_layered(f):
            kwargs[f.name] = _read_layers(child, tag, f.type == List[str])
        elif f.type == Optional[float]:
            kwargs[f.name] = _parse_number(child.text, tag)
        elif f.type == Optional[int]:
            try:
                kwargs[f.name] = int(child.text)
            except (TypeError, ValueError) as err:
                raise SerializationError(
                    f"<{tag}> holds '{child.text}', expected an integer"
                ) from err
        else:
            kwargs[f.name] = child.text or ""

    return cls(**kwargs)


def _read_crop(element, water_thickness):
    crop = _read_record(SoilCrop, element)
    thickness = element.find("Thickness")
    if thickness is not None:
        crop_thickness = _read_layers(thickness, "Thickness", strings=False)
        if crop_thickness != list(water_thickness):
            raise SerializationError(
                f"SoilCrop {crop.name}: layers differ from the water layers "
                f"({crop_thickness} vs {list(water_thickness)})"
            )
    return crop


def xml_to_soils(text) -> List[Soil]:
    """
    Parse a soil document. The root may be a single `<Soil>` or a `<folder>`; soils in
    nested folders are returned in document order.

    Raises:
        SerializationError: if the document is not well formed or any soil in it does not
        conform. No soils are returned in that case.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as err:
        raise SerializationError(f"Not a well formed soil document: {err}") from err

    if root.tag == "Soil":
        elements = [root]
    elif root.tag == "folder":
        elements = list(root.iter("Soil"))
    else:
        raise SerializationError(f"Unexpected root element <{root.tag}>")

    try:
        return [_read_record(Soil, element) for element in elements]
    except InvalidProfileError as err:
        raise SerializationError(f"Invalid soil in document: {err}") from err


def xml_to_soil(text) -> Soil:
    """Parse a document holding exactly one soil."""
    soils = xml_to_soils(text)
    if len(soils) != 1:
        raise SerializationError(f"Expected one soil, found {len(soils)}")
    return soils[0]
