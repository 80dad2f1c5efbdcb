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

from soil_finder.memory_store import MemorySoilStore
from soil_finder.soil_xml import xml_to_soil

from .helpers import read_data_file


@pytest.fixture
def soil1():
    return xml_to_soil(read_data_file("testsoil1.xml"))


@pytest.fixture
def soil2():
    return xml_to_soil(read_data_file("testsoil2.xml"))


@pytest.fixture
def store():
    return MemorySoilStore()
