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

import numpy as np
import pytest

from soil_finder.errors import InvalidProfileError
from soil_finder.utils import get_texture, haversine, map_layer_classes, resample_layers

partitions = [
    ([150, 120, 180, 270, 380, 400], [800, 700]),
    ([150, 120, 180, 270, 380, 400], [100] * 15),
    ([100, 100, 300, 300, 300, 300], [200, 300, 300, 600]),
    ([1500], [150, 120, 180, 270, 380, 400]),
    ([33.3, 66.7, 100], [10, 20, 30, 40, 100]),
]


@pytest.mark.parametrize("from_thickness, to_thickness", partitions)
def test_uniform_values_stay_uniform(from_thickness, to_thickness):
    values = [0.3] * len(from_thickness)
    result = resample_layers(values, from_thickness, to_thickness)

    assert result == pytest.approx([0.3] * len(to_thickness))


@pytest.mark.parametrize("from_thickness, to_thickness", partitions)
def test_resampling_conserves_depth_weighted_total(from_thickness, to_thickness):
    values = np.linspace(0.1, 0.5, len(from_thickness))
    result = resample_layers(values, from_thickness, to_thickness)

    assert np.dot(result, to_thickness) == pytest.approx(np.dot(values, from_thickness))


def test_target_layer_is_depth_weighted_average():
    # [0, 200) takes all of the 150mm layer and 50mm of the 120mm layer
    result = resample_layers([33, 17.04], [150, 120], [200, 70])

    assert result[0] == pytest.approx((33 * 150 + 17.04 * 50) / 200)
    assert result[1] == pytest.approx(17.04)


def test_bottom_value_is_extended_below_the_source():
    result = resample_layers([1.0, 2.0], [100, 100], [150, 150, 500])

    assert result == pytest.approx([(100 + 2 * 50) / 150, 2.0, 2.0])


def test_single_target_layer_averages_the_profile():
    result = resample_layers([22, 25, 63, 45], [100, 100, 300, 300], [800])
    assert result == pytest.approx([(2200 + 2500 + 18900 + 13500) / 800])


def test_resample_does_not_modify_inputs():
    values = [0.1, 0.2]
    from_thickness = [100, 100]
    to_thickness = [50, 250]
    resample_layers(values, from_thickness, to_thickness)

    assert values == [0.1, 0.2]
    assert from_thickness == [100, 100]
    assert to_thickness == [50, 250]


def test_resample_onto_no_layers():
    assert resample_layers([1.0], [100], []).size == 0


@pytest.mark.parametrize(
    "values, from_thickness, to_thickness",
    [
        ([], [], [100]),
        ([0.1, 0.2], [100], [100]),
        ([0.1], [100, 100], [100]),
        ([0.1], [0], [100]),
        ([0.1], [-100], [100]),
        ([0.1], [float("nan")], [100]),
        ([0.1], [100], [100, 0]),
    ],
)
def test_invalid_layers_raise(values, from_thickness, to_thickness):
    with pytest.raises(InvalidProfileError):
        resample_layers(values, from_thickness, to_thickness)


def test_map_layer_classes_uses_mid_depth():
    classes = map_layer_classes(
        ["Sandy loam", "Clay"], [200, 600], [100, 100, 300, 300, 300]
    )
    assert classes == ["Sandy loam", "Sandy loam", "Clay", "Clay", "Clay"]


def test_map_layer_classes_rejects_empty_source():
    with pytest.raises(InvalidProfileError):
        map_layer_classes([], [], [100])


def test_haversine():
    assert haversine(150, -28, 150, -28) == 0
    # One degree of latitude
    assert haversine(150, -28, 150, -29) == pytest.approx(111.19, abs=0.01)
    assert haversine(150, -28, 173.937, -35.258) == pytest.approx(2398, abs=5)


@pytest.mark.parametrize(
    "sand, silt, clay, texture",
    [
        (92, 5, 3, "Sand"),
        (85, 10, 5, "Loamy sand"),
        (70, 15, 15, "Sandy loam"),
        (40, 40, 20, "Loam"),
        (20, 65, 15, "Silt loam"),
        (5, 88, 7, "Silt"),
        (60, 15, 25, "Sandy clay loam"),
        (35, 30, 35, "Clay loam"),
        (10, 55, 35, "Silty clay loam"),
        (50, 5, 45, "Sandy clay"),
        (5, 50, 45, "Silty clay"),
        (20, 20, 60, "Clay"),
    ],
)
def test_get_texture(sand, silt, clay, texture):
    assert get_texture(sand, silt, clay) == texture


def test_get_texture_missing_fraction():
    assert get_texture(40, None, 20) is None
    assert get_texture(40, np.nan, 20) is None
