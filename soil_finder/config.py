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
import os

from platformdirs import user_data_dir

APP_NAME = os.environ.get("APP_NAME", "org.terraso.soilfinder")

# Bulk import/export of soil XML documents
DATA_PATH = os.environ.get("DATA_PATH", user_data_dir(APP_NAME))
SOIL_LIBRARY_PATH = f"{DATA_PATH}/soils.xml"

# Search
DEFAULT_NUM_TO_RETURN = int(os.environ.get("DEFAULT_NUM_TO_RETURN", 10))
EARTH_RADIUS_KM = 6371

# Database
DB_NAME = os.environ.get("DB_NAME", "soil_finder")
DB_HOST = os.environ.get("DB_HOST")
DB_USERNAME = os.environ.get("DB_USERNAME")
DB_PASSWORD = os.environ.get("DB_PASSWORD")
