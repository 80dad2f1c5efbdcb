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
import os

# local libraries
import soil_finder.config

from .soil_match import SoilQuery, rank_soils
from .soil_xml import soils_to_xml, xml_to_soils

# entry points
# add_soils
# search_soils
# get_soils
# import_soils
# export_soils

# Soils are identified by name: adding a soil whose name is already stored replaces the stored
# soil, with all of its layers and crops, in one transaction.
# search_soils returns names only; call get_soils for the full records.


##################################################################################################
#                                          add_soils                                             #
##################################################################################################
def add_soils(store, soils):
    """
    Store soils, replacing any stored soil of the same name.

    Each soil is written in its own transaction: the old record and its child collections are
    deleted and the new record inserted as one unit, so readers see either the old soil or the
    new one. Concurrent writers of one name take turns, and the last to commit wins.

    Returns:
        list: Names of the soils stored, in order.
    """
    names = []
    for soil in soils:
        with store.transaction():
            store.lock_name(soil.name)
            if store.find_by_name(soil.name) is not None:
                logging.info(f"Replacing soil {soil.name}")
                store.delete_with_children(soil.name)
            store.insert(soil)
        names.append(soil.name)

    logging.info(f"Stored {len(names)} soils")
    return names


##################################################################################################
#                                          search_soils                                          #
##################################################################################################
def search_soils(
    store,
    crop_name=None,
    thickness=None,
    pawc=None,
    cll=None,
    latitude=None,
    longitude=None,
    radius=None,
    num_to_return=None,
):
    """
    Find the stored soils that best match a target profile and/or location.

    Args:
        store: Soil store to search.
        crop_name (str): Crop whose parameters are matched. On its own, limits results to soils
            with parameters for the crop.
        thickness (list): Layer thicknesses (mm) of the target profile.
        pawc (list): Target plant available water capacity (mm) of each layer.
        cll (list): Target crop lower limit of each layer. Use instead of pawc.
        latitude (float), longitude (float): Target location.
        radius (float): Only soils within this many km of the target location are returned.
        num_to_return (int): Maximum number of names returned.

    Returns:
        list: Soil names, best match first.

    Raises:
        InvalidQueryError: if the arguments do not form a valid query.
    """
    query = SoilQuery(
        crop_name=crop_name,
        thickness=thickness,
        pawc=pawc,
        cll=cll,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        num_to_return=(
            soil_finder.config.DEFAULT_NUM_TO_RETURN if num_to_return is None else num_to_return
        ),
    )

    with store.snapshot():
        soils = store.load_many(store.list_all_names(), skip_invalid=True)

    return rank_soils(query, soils)


##################################################################################################
#                                          get_soils                                             #
##################################################################################################
def get_soils(store, names):
    """
    Return the full soil records for the given names, in the same order.

    Raises:
        NotFoundError: if any name has no stored soil.
    """
    with store.snapshot():
        return store.load_many(list(names))


##################################################################################################
#                                          import/export                                         #
##################################################################################################
def import_soils(store, path=None):
    """Read a soil XML document and store every soil in it. Returns the names stored."""
    path = path or soil_finder.config.SOIL_LIBRARY_PATH
    with open(path, encoding="utf-8") as f:
        soils = xml_to_soils(f.read())

    logging.info(f"Read {len(soils)} soils from {path}")
    return add_soils(store, soils)


def export_soils(store, path=None, names=None):
    """Write stored soils (all of them by default) to a soil XML document."""
    path = path or soil_finder.config.SOIL_LIBRARY_PATH
    with store.snapshot():
        if names is None:
            names = store.list_all_names()
        soils = get_soils(store, names)

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write('<?xml version="1.0" encoding="utf-8"?>\n')
        f.write(soils_to_xml(soils))
        f.write("\n")

    logging.info(f"Wrote {len(soils)} soils to {path}")
    return len(soils)
