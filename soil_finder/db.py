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
import logging
from dataclasses import fields
from typing import List, Optional

# Third-party libraries
import psycopg
from psycopg import pq, sql
from psycopg.rows import dict_row

# local libraries
import soil_finder.config

from .errors import InvalidProfileError, NotFoundError
from .models import CHILD_TABLES, Soil, SoilCrop

COLUMN_TYPES = {
    str: "text",
    Optional[str]: "text",
    Optional[int]: "integer",
    Optional[float]: "double precision",
    List[str]: "text[]",
    List[float]: "double precision[]",
}

SOIL_TABLE = "soil"
CROP_TABLE = "soil_crop"


def get_datastore_connection():
    """
    Establish a connection to the datastore using app configurations.

    The connection runs in autocommit mode: single statements commit on their own and
    `connection.transaction()` blocks commit or roll back as a unit.

    Returns:
        Connection object if successful, otherwise raises.
    """
    try:
        return psycopg.connect(
            host=soil_finder.config.DB_HOST,
            user=soil_finder.config.DB_USERNAME,
            password=soil_finder.config.DB_PASSWORD,
            dbname=soil_finder.config.DB_NAME,
            autocommit=True,
        )
    except Exception as err:
        logging.error(f"Database connection failed: {err}")
        raise


def _columns(cls, exclude=()):
    return [
        f
        for f in fields(cls)
        if f.name not in exclude and f.name not in CHILD_TABLES and f.name != "crops"
    ]


def _table_ddl(table, cls, key_columns):
    columns = key_columns + [
        sql.SQL("{} {}").format(sql.Identifier(f.name), sql.SQL(COLUMN_TYPES[f.type]))
        for f in _columns(cls, exclude=("name",))
    ]
    return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
        sql.Identifier(table), sql.SQL(", ").join(columns)
    )


def _owned_by_soil():
    return sql.SQL("soil_name text NOT NULL REFERENCES {} (name) ON DELETE CASCADE").format(
        sql.Identifier(SOIL_TABLE)
    )


def _insert(cur, table, row):
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        sql.Identifier(table),
        sql.SQL(", ").join(map(sql.Identifier, row)),
        sql.SQL(", ").join(sql.Placeholder() * len(row)),
    )
    cur.execute(query, list(row.values()))


def _select_owned(cur, table, names, order_by):
    query = sql.SQL("SELECT * FROM {} WHERE soil_name = ANY(%s) ORDER BY {}").format(
        sql.Identifier(table), sql.SQL(order_by)
    )
    cur.execute(query, (names,))
    return cur.fetchall()


class PostgresSoilStore:
    """
    Soil store backed by PostgreSQL. Each soil is a row of `soil` plus one row in a table per
    child collection and one `soil_crop` row per crop; child rows cascade with their soil.
    """

    def __init__(self, connection):
        self.connection = connection

    def create_schema(self):
        statements = [
            _table_ddl(
                SOIL_TABLE,
                Soil,
                [sql.SQL("seq bigserial"), sql.SQL("name text PRIMARY KEY")],
            ),
            _table_ddl(
                CROP_TABLE,
                SoilCrop,
                [
                    _owned_by_soil(),
                    sql.SQL("seq integer NOT NULL"),
                    sql.SQL("name text NOT NULL"),
                    sql.SQL("PRIMARY KEY (soil_name, name)"),
                ],
            ),
        ]
        for table, cls in CHILD_TABLES.items():
            statements.append(
                _table_ddl(table, cls, [_owned_by_soil(), sql.SQL("PRIMARY KEY (soil_name)")])
            )

        with self.transaction(), self.connection.cursor() as cur:
            for statement in statements:
                cur.execute(statement)
        logging.info("Soil tables ready")

    def transaction(self):
        return self.connection.transaction()

    @contextlib.contextmanager
    def snapshot(self):
        """
        Read block in which every query sees the same committed state. Opened outside a
        transaction it starts one at REPEATABLE READ; inside one it joins the enclosing unit.
        """
        outermost = self.connection.info.transaction_status == pq.TransactionStatus.IDLE
        with self.connection.transaction():
            if outermost:
                # Must run before any query takes the snapshot
                self.connection.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ")
            yield self

    def lock_name(self, name):
        """
        Hold a lock on the soil name until the enclosing transaction ends, so concurrent
        writers of the same name take turns.
        """
        self.connection.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (name,))

    def find_by_name(self, name):
        try:
            return self.load_many([name])[0]
        except NotFoundError:
            return None

    def delete_with_children(self, name):
        try:
            with self.connection.cursor() as cur:
                cur.execute(
                    sql.SQL("DELETE FROM {} WHERE name = %s").format(sql.Identifier(SOIL_TABLE)),
                    (name,),
                )
                deleted = cur.rowcount
        except psycopg.Error as err:
            logging.error(f"Error deleting soil {name}: {err}")
            raise
        if deleted == 0:
            raise NotFoundError(name)

    def insert(self, soil):
        try:
            with self.transaction(), self.connection.cursor() as cur:
                _insert(
                    cur,
                    SOIL_TABLE,
                    {f.name: getattr(soil, f.name) for f in _columns(Soil)},
                )
                for table, cls in CHILD_TABLES.items():
                    child = getattr(soil, table)
                    row = {"soil_name": soil.name}
                    row.update({f.name: getattr(child, f.name) for f in _columns(cls)})
                    _insert(cur, table, row)
                for seq, crop in enumerate(soil.water.crops.values()):
                    row = {"soil_name": soil.name, "seq": seq}
                    row.update({f.name: getattr(crop, f.name) for f in _columns(SoilCrop)})
                    _insert(cur, CROP_TABLE, row)
        except psycopg.Error as err:
            logging.error(f"Error inserting soil {soil.name}: {err}")
            raise

    def list_all_names(self):
        with self.connection.cursor() as cur:
            cur.execute(
                sql.SQL("SELECT name FROM {} ORDER BY seq").format(sql.Identifier(SOIL_TABLE))
            )
            return [name for (name,) in cur.fetchall()]

    def load_many(self, names, skip_invalid=False):
        """
        Load the named soils, in order, from one snapshot.

        With `skip_invalid`, stored soils that no longer form a valid record are logged and
        left out instead of raising InvalidProfileError.
        """
        names = list(names)
        if not names:
            return []

        try:
            with self.snapshot(), self.connection.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    sql.SQL("SELECT * FROM {} WHERE name = ANY(%s)").format(
                        sql.Identifier(SOIL_TABLE)
                    ),
                    (names,),
                )
                soil_rows = {row["name"]: row for row in cur.fetchall()}
                children = {}
                for table in CHILD_TABLES:
                    rows = _select_owned(cur, table, names, "soil_name")
                    children[table] = {row["soil_name"]: row for row in rows}
                crop_rows = _select_owned(cur, CROP_TABLE, names, "soil_name, seq")
        except psycopg.Error as err:
            logging.error(f"Error loading soils: {err}")
            raise

        missing = [name for name in names if name not in soil_rows]
        if missing:
            raise NotFoundError(missing[0])

        crops = {}
        for row in crop_rows:
            crops.setdefault(row["soil_name"], []).append(
                SoilCrop(**{f.name: row[f.name] for f in _columns(SoilCrop)})
            )

        soils = []
        for name in names:
            try:
                soils.append(_build_soil(soil_rows[name], children, crops.get(name, [])))
            except InvalidProfileError as err:
                if not skip_invalid:
                    raise
                logging.warning(f"Skipping stored soil {name}: {err}")
        return soils


def _build_soil(soil_row, children, crops):
    name = soil_row["name"]
    kwargs = {f.name: soil_row[f.name] for f in _columns(Soil)}
    for table, cls in CHILD_TABLES.items():
        row = children[table].get(name, {})
        child = {f.name: row[f.name] for f in _columns(cls) if f.name in row}
        if table == "water":
            child["crops"] = crops
        kwargs[table] = cls(**child)
    return Soil(**kwargs)
