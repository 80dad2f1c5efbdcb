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


class SoilFinderError(Exception):
    """Base class for soil_finder errors."""


class InvalidProfileError(SoilFinderError, ValueError):
    """A soil profile is malformed (empty or non-positive thickness, mismatched layers)."""


class UnknownCropError(SoilFinderError, KeyError):
    """A soil has no parameters for the requested crop."""

    def __init__(self, soil_name, crop_name):
        super().__init__(f"{soil_name}: no crop named '{crop_name}'")
        self.soil_name = soil_name
        self.crop_name = crop_name

    def __str__(self):
        # KeyError quotes its argument otherwise
        return self.args[0]


class NotFoundError(SoilFinderError, LookupError):
    """A requested soil name has no stored record."""

    def __init__(self, name):
        super().__init__(f"Soil not found: {name}")
        self.name = name


class SerializationError(SoilFinderError):
    """A soil document does not conform to the expected schema."""


class InvalidQueryError(SoilFinderError, ValueError):
    """Search arguments do not form a valid query."""
