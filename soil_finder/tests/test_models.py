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

import pytest

from soil_finder.errors import InvalidProfileError, UnknownCropError
from soil_finder.models import Analysis, Soil, SoilCrop, SoilOrganicMatter, Water


def test_crops_are_keyed_by_name():
    water = Water(
        thickness=[100, 200],
        dul=[0.3, 0.3],
        crops=[SoilCrop(name="wheat", ll=[0.1, 0.1]), SoilCrop(name="barley", ll=[0.1, 0.2])],
    )
    assert list(water.crops) == ["wheat", "barley"]
    assert water.crops["barley"].ll == [0.1, 0.2]


def test_crop_lookup_miss_raises_unknown_crop(soil1):
    assert soil1.crop("wheat").name == "wheat"
    with pytest.raises(UnknownCropError) as excinfo:
        soil1.crop("sorghum")
    assert "sorghum" in str(excinfo.value)


def test_layer_values_are_floats():
    water = Water(thickness=[100, "200"], dul=[1, 0.3])
    assert water.thickness == [100.0, 200.0]
    assert all(isinstance(v, float) for v in water.dul)


def test_empty_arrays_are_allowed():
    soil = Soil(name="Bare")
    assert soil.thickness == []
    assert soil.water.crops == {}
    assert not soil.has_location


@pytest.mark.parametrize(
    "make",
    [
        lambda: Water(thickness=[100, 200], dul=[0.3]),
        lambda: Water(thickness=[100, 0]),
        lambda: Water(thickness=[100, -5]),
        lambda: SoilOrganicMatter(thickness=[100], oc=[1.0, 0.5]),
        lambda: Analysis(thickness=[100, 100], texture=["Clay"]),
        lambda: Water(thickness=[100], crops=[SoilCrop(name="wheat", ll=[0.1, 0.1])]),
        lambda: Water(
            thickness=[100],
            crops=[SoilCrop(name="wheat", ll=[0.1]), SoilCrop(name="wheat", ll=[0.2])],
        ),
        lambda: Water(thickness=[100], bd=["dense"]),
        lambda: SoilCrop(ll=[0.1]),
        lambda: Soil(name=""),
    ],
)
def test_malformed_profiles_raise(make):
    with pytest.raises(InvalidProfileError):
        make()


def test_has_location():
    assert Soil(name="Here", latitude=-28, longitude=150).has_location
    assert not Soil(name="Half", latitude=-28).has_location
    assert not Soil(name="NaN", latitude=float("nan"), longitude=150).has_location
