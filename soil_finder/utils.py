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

###################################################################################################
#                                       Helper Functions.                                         #
###################################################################################################
# Standard libraries
import math

# Third-party libraries
import numpy as np

# local libraries
import soil_finder.config

from .errors import InvalidProfileError


def layer_boundaries(thickness):
    """
    Return the (top, bottom) depths of each layer of a thickness array, starting at the
    surface (depth 0).
    """
    bottom = np.cumsum(np.asarray(thickness, dtype=float))
    top = np.concatenate(([0.0], bottom[:-1]))
    return top, bottom


def check_thickness(thickness, label="thickness"):
    thickness = np.asarray(thickness, dtype=float)
    if thickness.ndim != 1:
        raise InvalidProfileError(f"{label} must be a flat list of layer thicknesses")
    # `~(x > 0)` also flags NaN
    if np.any(~(thickness > 0)):
        raise InvalidProfileError(f"{label} values must be positive, got {thickness.tolist()}")
    return thickness


def resample_layers(values, from_thickness, to_thickness):
    """
    Re-express layered values on a different layer structure.

    Each target layer receives the depth-weighted average of the source values overlapping
    it: for a target layer spanning [t0, t1), sum(v[i] * overlap(source_i, [t0, t1))) / (t1 - t0).
    When the target layers extend below the bottom of the source profile, the bottom source
    value is carried down to cover the remainder.

    Parameters:
    - values (array-like): One value per source layer.
    - from_thickness (array-like): Source layer thicknesses (mm).
    - to_thickness (array-like): Target layer thicknesses (mm).

    Returns:
    - numpy.ndarray: One value per target layer.

    Raises:
    - InvalidProfileError: if the source has no layers, a thickness is not positive, or the
      number of values differs from the number of source layers.
    """
    values = np.asarray(values, dtype=float)
    from_thickness = check_thickness(from_thickness, "source thickness")
    to_thickness = check_thickness(to_thickness, "target thickness")

    if from_thickness.size == 0:
        raise InvalidProfileError("Cannot resample values from an empty layer structure")
    if values.shape != from_thickness.shape:
        raise InvalidProfileError(
            f"{values.size} values supplied for {from_thickness.size} source layers"
        )
    if to_thickness.size == 0:
        return np.array([], dtype=float)

    from_top, from_bottom = layer_boundaries(from_thickness)
    to_top, to_bottom = layer_boundaries(to_thickness)

    # Constant extrapolation: stretch the bottom source layer to the bottom of the target.
    from_bottom[-1] = max(from_bottom[-1], to_bottom[-1])

    # overlap[j, i] is the depth shared by target layer j and source layer i
    overlap = np.minimum(to_bottom[:, None], from_bottom[None, :]) - np.maximum(
        to_top[:, None], from_top[None, :]
    )
    overlap = np.clip(overlap, 0, None)

    return overlap @ values / to_thickness


def map_layer_classes(classes, from_thickness, to_thickness):
    """
    Map categorical layer values (e.g. texture names) onto another layer structure. Each
    target layer takes the class of the source layer containing its mid-depth; target layers
    below the source profile take the bottom class.
    """
    from_thickness = check_thickness(from_thickness, "source thickness")
    to_thickness = check_thickness(to_thickness, "target thickness")
    if from_thickness.size == 0:
        raise InvalidProfileError("Cannot map classes from an empty layer structure")
    if len(classes) != from_thickness.size:
        raise InvalidProfileError(
            f"{len(classes)} classes supplied for {from_thickness.size} source layers"
        )

    _, from_bottom = layer_boundaries(from_thickness)
    to_top, _ = layer_boundaries(to_thickness)
    mid_depths = to_top + to_thickness / 2

    index = np.searchsorted(from_bottom, mid_depths, side="right")
    index = np.minimum(index, from_thickness.size - 1)
    return [classes[i] for i in index]


def haversine(lon1, lat1, lon2, lat2):
    """
    Calculate the great circle distance between two points on the earth specified in
    decimal degrees.

    Args:
    - lon1, lat1: Longitude and latitude of the first point.
    - lon2, lat2: Longitude and latitude of the second point.

    Returns:
    - Distance in kilometers between the two points.
    """
    # Convert decimal degrees to radians
    lon1, lat1, lon2, lat2 = map(math.radians, [lon1, lat1, lon2, lat2])

    # Haversine formula
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(a)))
    return c * soil_finder.config.EARTH_RADIUS_KM


def get_texture(sand, silt, clay):
    """
    Classify soil texture (USDA texture triangle) from sand, silt, and clay percentages.

    Returns:
    - str: Texture class, "Unknown" when the fractions fall outside every class, or None when
      any fraction is missing.
    """
    if any(v is None or np.isnan(v) for v in (sand, silt, clay)):
        return None

    # Calculate derived values.
    silt_clay = silt + 1.5 * clay
    silt_2x_clay = silt + 2.0 * clay

    # Define conditions and corresponding texture classifications.
    conditions = [
        silt_clay < 15,
        (silt_clay >= 15) & (silt_clay < 30),
        (((7 <= clay) & (clay <= 20)) & (sand > 52))
        | ((clay < 7) & (silt < 50) & (silt_2x_clay >= 30)),
        (7 <= clay) & (clay <= 27) & (28 <= silt) & (silt < 50) & (sand <= 52),
        (silt >= 50) & (((12 <= clay) & (clay < 27)) | ((silt < 80) & (clay < 12))),
        (silt >= 80) & (clay < 12),
        (20 <= clay) & (clay < 35) & (silt < 28) & (sand > 45),
        (27 <= clay) & (clay < 40) & (sand <= 45) & (sand > 20),
        (27 <= clay) & (clay < 40) & (sand <= 20),
        (clay >= 35) & (sand >= 45),
        (clay >= 40) & (silt >= 40) & (sand <= 45),
        (clay >= 40) & (sand <= 45),
    ]

    choices = [
        "Sand",
        "Loamy sand",
        "Sandy loam",
        "Loam",
        "Silt loam",
        "Silt",
        "Sandy clay loam",
        "Clay loam",
        "Silty clay loam",
        "Sandy clay",
        "Silty clay",
        "Clay",
    ]

    return str(np.select(conditions, choices, default="Unknown"))
