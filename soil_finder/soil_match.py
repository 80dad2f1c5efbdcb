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
import logging
import numbers
from dataclasses import dataclass
from typing import List, Optional

# Third-party libraries
import numpy as np
import pandas as pd
from sklearn.metrics.pairwise import euclidean_distances

# local libraries
import soil_finder.config

from .errors import InvalidProfileError, InvalidQueryError, UnknownCropError
from .rank_utils import finalize_rank_output
from .utils import haversine, resample_layers


def _as_vector(name, values):
    if values is None:
        return None
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError) as err:
        raise InvalidQueryError(f"{name} must be a list of numbers") from err


def _as_float(name, value):
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError) as err:
        raise InvalidQueryError(f"{name} must be a number") from err
    if np.isnan(value):
        raise InvalidQueryError(f"{name} must be a number")
    return value


@dataclass
class SoilQuery:
    """
    Search criteria. `thickness` together with exactly one of `pawc` or `cll` describes a
    target profile for `crop_name`; `latitude`/`longitude` (and optionally `radius` in km)
    describe a target location.
    """

    crop_name: Optional[str] = None
    thickness: Optional[List[float]] = None
    pawc: Optional[List[float]] = None
    cll: Optional[List[float]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius: Optional[float] = None
    num_to_return: int = soil_finder.config.DEFAULT_NUM_TO_RETURN

    def __post_init__(self):
        self.thickness = _as_vector("thickness", self.thickness)
        self.pawc = _as_vector("pawc", self.pawc)
        self.cll = _as_vector("cll", self.cll)
        self.latitude = _as_float("latitude", self.latitude)
        self.longitude = _as_float("longitude", self.longitude)
        self.radius = _as_float("radius", self.radius)

        if self.pawc is not None and self.cll is not None:
            raise InvalidQueryError("Match on either pawc or cll, not both")
        target = self.target
        if target is not None or self.thickness is not None:
            if target is None or self.thickness is None:
                raise InvalidQueryError("thickness must be supplied with pawc or cll")
            if not self.thickness or len(target) != len(self.thickness):
                raise InvalidQueryError(
                    f"{len(target)} target values supplied for {len(self.thickness)} layers"
                )
            if any(not t > 0 for t in self.thickness):
                raise InvalidQueryError("thickness values must be positive")
            if not self.crop_name:
                raise InvalidQueryError("A crop name is needed to match on pawc or cll")

        if (self.latitude is None) != (self.longitude is None):
            raise InvalidQueryError("latitude and longitude must be supplied together")
        if self.latitude is not None:
            if not -90 <= self.latitude <= 90 or not -180 <= self.longitude <= 180:
                raise InvalidQueryError(
                    f"Invalid location: {self.latitude}, {self.longitude}"
                )
        if self.radius is not None:
            if self.latitude is None:
                raise InvalidQueryError("radius needs a latitude and longitude")
            if self.radius < 0:
                raise InvalidQueryError("radius must not be negative")

        if isinstance(self.num_to_return, bool) or not isinstance(
            self.num_to_return, numbers.Integral
        ):
            raise InvalidQueryError("num_to_return must be an integer")
        if self.num_to_return < 1:
            raise InvalidQueryError("num_to_return must be at least 1")

    @property
    def target(self):
        return self.pawc if self.pawc is not None else self.cll

    @property
    def matches_profile(self):
        return self.target is not None

    @property
    def is_geographic(self):
        return self.latitude is not None


##################################################################################################
#                                   Profile similarity                                           #
##################################################################################################
def crop_pawc(soil, crop_name):
    """
    Plant available water capacity (mm) of each water layer for a crop:
    (DUL - LL) * thickness.
    """
    crop = soil.crop(crop_name)
    water = soil.water

    if water.layer_count == 0:
        raise InvalidProfileError(f"{soil.name}: no water layers")
    if len(water.dul) != water.layer_count:
        raise InvalidProfileError(f"{soil.name}: DUL is missing")
    if len(crop.ll) != water.layer_count:
        raise InvalidProfileError(f"{soil.name}: LL is missing for {crop_name}")

    return (np.asarray(water.dul) - np.asarray(crop.ll)) * np.asarray(water.thickness)


def profile_distance(query: SoilQuery, soil):
    """
    Euclidean distance between the query's target layer values and the soil's values for the
    same crop, after resampling the soil's values onto the query's layers.

    Raises:
    - UnknownCropError: the soil has no parameters for the query's crop.
    - InvalidProfileError: the soil's layer data cannot be compared.
    """
    crop = soil.crop(query.crop_name)

    if query.pawc is not None:
        native = crop_pawc(soil, query.crop_name)
    else:
        if not crop.ll:
            raise InvalidProfileError(f"{soil.name}: LL is missing for {query.crop_name}")
        native = crop.ll

    resampled = resample_layers(native, soil.thickness, query.thickness)
    if not np.isfinite(resampled).all():
        raise InvalidProfileError(f"{soil.name}: missing values in {query.crop_name} data")

    return float(euclidean_distances([query.target], [resampled])[0, 0])


##################################################################################################
#                                   Location                                                     #
##################################################################################################
def geographic_distance(query: SoilQuery, soil):
    """Distance (km) from the query location to the soil, or None if the soil has no location."""
    if not soil.has_location:
        return None
    return haversine(query.longitude, query.latitude, soil.longitude, soil.latitude)


##################################################################################################
#                                   Ranking                                                      #
##################################################################################################
def rank_soils(query: SoilQuery, soils):
    """
    Rank candidate soils against a query and return the names of the best matches.

    Soils are ordered by profile distance when the query has a target profile, with distance
    from the query location breaking ties; by distance alone for a location-only query; and
    in the given order otherwise. Soils beyond the query radius, soils without the query's
    crop and soils whose data cannot be compared are left out.
    """
    rows = []
    for order, soil in enumerate(soils):
        row = {"name": soil.name, "order": order}

        if query.matches_profile:
            try:
                row["profile_distance"] = profile_distance(query, soil)
            except (InvalidProfileError, UnknownCropError) as err:
                logging.debug(f"Skipping {soil.name}: {err}")
                continue
        elif query.crop_name and query.crop_name not in soil.water.crops:
            logging.debug(f"Skipping {soil.name}: no crop named '{query.crop_name}'")
            continue

        if query.is_geographic:
            distance = geographic_distance(query, soil)
            if distance is None:
                if query.radius is not None or not query.matches_profile:
                    logging.debug(f"Skipping {soil.name}: no location")
                    continue
                distance = np.inf
            elif query.radius is not None and distance > query.radius:
                continue
            row["geo_distance"] = distance

        rows.append(row)

    sort_by = []
    if query.matches_profile:
        sort_by.append("profile_distance")
    if query.is_geographic:
        sort_by.append("geo_distance")

    D_rank = pd.DataFrame(rows, columns=["name", "order"] + sort_by)
    names = finalize_rank_output(D_rank, sort_by, query.num_to_return)
    logging.info(f"Ranked {len(rows)} of {len(soils)} soils, returning {len(names)}")
    return names
