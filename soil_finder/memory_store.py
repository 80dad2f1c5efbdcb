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
import contextlib
import copy
import logging
import threading

# local libraries
from .errors import NotFoundError, SoilFinderError


class MemorySoilStore:
    """
    Soil store held in process memory, keyed by soil name in insertion order.

    Writes made inside `transaction()` are staged on a private copy and published in one step
    when the block exits without error, so other threads only ever see committed states.
    Soils are copied on the way in and out; callers cannot change stored records by mutating
    the objects they hold.
    """

    def __init__(self, soils=()):
        self._lock = threading.RLock()
        self._local = threading.local()
        self._soils = {}
        for soil in soils:
            self.insert(soil)

    def _view(self):
        staged = getattr(self._local, "staged", None)
        return self._soils if staged is None else staged

    @contextlib.contextmanager
    def transaction(self):
        if getattr(self._local, "staged", None) is not None:
            # Nested blocks join the enclosing unit of work
            yield self
            return

        with self._lock:
            self._local.staged = dict(self._soils)
            try:
                yield self
                self._soils = self._local.staged
            finally:
                self._local.staged = None

    def snapshot(self):
        return self.transaction()

    def lock_name(self, name):
        # Writers already take turns on the store lock
        pass

    def find_by_name(self, name):
        soil = self._view().get(name)
        return copy.deepcopy(soil) if soil is not None else None

    def delete_with_children(self, name):
        with self.transaction():
            staged = self._view()
            if name not in staged:
                raise NotFoundError(name)
            # Child collections are owned by the Soil object and go with it
            del staged[name]
        logging.debug(f"Deleted soil {name}")

    def insert(self, soil):
        with self.transaction():
            staged = self._view()
            if soil.name in staged:
                raise SoilFinderError(f"Soil already stored: {soil.name}")
            staged[soil.name] = copy.deepcopy(soil)
        logging.debug(f"Inserted soil {soil.name}")

    def list_all_names(self):
        return list(self._view())

    def load_many(self, names, skip_invalid=False):
        # Records are validated when they are built, so there is nothing to skip
        soils = self._view()
        missing = [name for name in names if name not in soils]
        if missing:
            raise NotFoundError(missing[0])
        return [copy.deepcopy(soils[name]) for name in names]

    def __len__(self):
        return len(self._view())
