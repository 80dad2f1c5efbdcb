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

# Standard libraries
import math
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional

# local libraries
from .errors import InvalidProfileError, UnknownCropError

###################################################################################################
#                                      Field declarations                                         #
###################################################################################################
# Each field carries the element name it uses in an APSoil document ("tag"). Layered fields hold
# one value per layer of the owning table.


def scalar(tag):
    return field(default=None, metadata={"tag": tag})


def layers(tag):
    return field(default_factory=list, metadata={"tag": tag, "layered": True})


def is_layered(f):
    return f.metadata.get("layered", False)


def _as_float(owner, name, value):
    try:
        return float(value)
    except (TypeError, ValueError) as err:
        raise InvalidProfileError(f"{owner}: {name} is not a number: {value!r}") from err


class _Record:
    def __post_init__(self):
        owner = type(self).__name__
        for f in fields(self):
            value = getattr(self, f.name)
            if is_layered(f):
                if f.type == List[str]:
                    value = [None if v is None or v == "" else str(v) for v in value]
                else:
                    value = [_as_float(owner, f.name, v) for v in value]
            elif value is not None and f.type == Optional[float]:
                value = _as_float(owner, f.name, value)
            elif value is not None and f.type == Optional[int]:
                value = int(_as_float(owner, f.name, value))
            setattr(self, f.name, value)


class _LayerTable(_Record):
    """A child collection of arrays indexed by the layers of its own `thickness`."""

    def __post_init__(self):
        super().__post_init__()
        owner = type(self).__name__
        for value in self.thickness:
            # `not value > 0` also rejects NaN
            if not value > 0:
                raise InvalidProfileError(
                    f"{owner}: thickness values must be positive, got {self.thickness}"
                )
        for f in fields(self):
            values = getattr(self, f.name)
            if is_layered(f) and values and len(values) != self.layer_count:
                raise InvalidProfileError(
                    f"{owner}: {f.name} has {len(values)} values for {self.layer_count} layers"
                )

    @property
    def layer_count(self):
        return len(self.thickness)


###################################################################################################
#                                         Soil records                                            #
###################################################################################################


@dataclass
class SoilCrop(_Record):
    name: str = field(default=None, metadata={"tag": "name"})
    ll: List[float] = layers("LL")
    kl: List[float] = layers("KL")
    xf: List[float] = layers("XF")

    def __post_init__(self):
        super().__post_init__()
        if not self.name:
            raise InvalidProfileError("SoilCrop: a crop needs a name")


@dataclass
class Water(_LayerTable):
    thickness: List[float] = layers("Thickness")
    bd: List[float] = layers("BD")
    air_dry: List[float] = layers("AirDry")
    ll15: List[float] = layers("LL15")
    dul: List[float] = layers("DUL")
    sat: List[float] = layers("SAT")
    ks: List[float] = layers("KS")
    crops: Dict[str, SoilCrop] = field(default_factory=dict, metadata={"tag": "SoilCrop"})

    def __post_init__(self):
        super().__post_init__()
        crops = self.crops.values() if isinstance(self.crops, dict) else self.crops
        self.crops = {}
        for crop in crops:
            if crop.name in self.crops:
                raise InvalidProfileError(f"Water: crop '{crop.name}' is listed twice")
            for name in ("ll", "kl", "xf"):
                values = getattr(crop, name)
                if values and len(values) != self.layer_count:
                    raise InvalidProfileError(
                        f"SoilCrop {crop.name}: {name} has {len(values)} values "
                        f"for {self.layer_count} layers"
                    )
            self.crops[crop.name] = crop


@dataclass
class SoilWater(_LayerTable):
    summer_cona: Optional[float] = scalar("SummerCona")
    summer_u: Optional[float] = scalar("SummerU")
    summer_date: Optional[str] = scalar("SummerDate")
    winter_cona: Optional[float] = scalar("WinterCona")
    winter_u: Optional[float] = scalar("WinterU")
    winter_date: Optional[str] = scalar("WinterDate")
    diffus_const: Optional[float] = scalar("DiffusConst")
    diffus_slope: Optional[float] = scalar("DiffusSlope")
    salb: Optional[float] = scalar("Salb")
    cn2_bare: Optional[float] = scalar("CN2Bare")
    cn_red: Optional[float] = scalar("CNRed")
    cn_cov: Optional[float] = scalar("CNCov")
    slope: Optional[float] = scalar("Slope")
    discharge_width: Optional[float] = scalar("DischargeWidth")
    catchment_area: Optional[float] = scalar("CatchmentArea")
    thickness: List[float] = layers("Thickness")
    swcon: List[float] = layers("SWCON")


@dataclass
class SoilOrganicMatter(_LayerTable):
    root_cn: Optional[float] = scalar("RootCN")
    root_wt: Optional[float] = scalar("RootWt")
    soil_cn: Optional[float] = scalar("SoilCN")
    enr_a_coeff: Optional[float] = scalar("EnrACoeff")
    enr_b_coeff: Optional[float] = scalar("EnrBCoeff")
    thickness: List[float] = layers("Thickness")
    oc: List[float] = layers("OC")
    fbiom: List[float] = layers("FBiom")
    finert: List[float] = layers("FInert")
    oc_units: Optional[str] = scalar("OCUnits")


@dataclass
class Analysis(_LayerTable):
    thickness: List[float] = layers("Thickness")
    texture: List[str] = layers("Texture")
    ph: List[float] = layers("PH")
    ph_units: Optional[str] = scalar("PHUnits")
    ec: List[float] = layers("EC")
    esp: List[float] = layers("ESP")
    cec: List[float] = layers("CEC")
    cl: List[float] = layers("CL")
    particle_size_sand: List[float] = layers("ParticleSizeSand")
    particle_size_silt: List[float] = layers("ParticleSizeSilt")
    particle_size_clay: List[float] = layers("ParticleSizeClay")


@dataclass
class Soil(_Record):
    """
    A named soil profile. `name` identifies the record: storing a soil whose name is already
    present replaces the stored record and all of its child collections.
    """

    name: str = field(default=None, metadata={"tag": "name"})
    record_number: Optional[int] = scalar("RecordNumber")
    asc_order: Optional[str] = scalar("ASCOrder")
    asc_sub_order: Optional[str] = scalar("ASCSubOrder")
    soil_type: Optional[str] = scalar("SoilType")
    local_name: Optional[str] = scalar("LocalName")
    site: Optional[str] = scalar("Site")
    nearest_town: Optional[str] = scalar("NearestTown")
    region: Optional[str] = scalar("Region")
    state: Optional[str] = scalar("State")
    country: Optional[str] = scalar("Country")
    natural_vegetation: Optional[str] = scalar("NaturalVegetation")
    apsoil_number: Optional[str] = scalar("ApsoilNumber")
    latitude: Optional[float] = scalar("Latitude")
    longitude: Optional[float] = scalar("Longitude")
    location_accuracy: Optional[str] = scalar("LocationAccuracy")
    year_of_sampling: Optional[str] = scalar("YearOfSampling")
    data_source: Optional[str] = scalar("DataSource")
    comments: Optional[str] = scalar("Comments")
    water: Water = field(default_factory=Water, metadata={"tag": "Water"})
    soil_water: SoilWater = field(default_factory=SoilWater, metadata={"tag": "SoilWater"})
    soil_organic_matter: SoilOrganicMatter = field(
        default_factory=SoilOrganicMatter, metadata={"tag": "SoilOrganicMatter"}
    )
    analysis: Analysis = field(default_factory=Analysis, metadata={"tag": "Analysis"})

    def __post_init__(self):
        super().__post_init__()
        if not self.name:
            raise InvalidProfileError("Soil: a soil needs a name")

    @property
    def thickness(self):
        return self.water.thickness

    @property
    def has_location(self):
        return not (
            self.latitude is None
            or self.longitude is None
            or math.isnan(self.latitude)
            or math.isnan(self.longitude)
        )

    def crop(self, crop_name):
        try:
            return self.water.crops[crop_name]
        except KeyError:
            raise UnknownCropError(self.name, crop_name) from None


# Child collection type for each table-valued field of a Soil
CHILD_TABLES = {
    "water": Water,
    "soil_water": SoilWater,
    "soil_organic_matter": SoilOrganicMatter,
    "analysis": Analysis,
}
