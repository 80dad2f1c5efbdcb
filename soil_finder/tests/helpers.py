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

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")

KERIKERI = "Clay (Kerikeri No1353)"
BILLA_BILLA = "Red Chromosol (Billa Billa No066)"


def read_data_file(file_name):
    with open(os.path.join(DATA_DIR, file_name), encoding="utf-8") as f:
        return f.read()
