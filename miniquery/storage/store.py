"""
Table Store - Read-only access to the tables a query runs against

Tables are plain lists of row dicts keyed by table name. The store resolves
table names (exact match first, then case-insensitive) and hands out the
row lists; it never copies or mutates them.

Tables can also be loaded from a directory holding one ``<table>.json`` file
per table. A file contains either a list of row objects or an object of the
form ``{"rows": [...], "schema": [{"column": ..., "type": ...}, ...]}``.
"""

import os
import json
import logging
from typing import Dict, List, Any, Optional

from ..core.errors import UnknownTable
from ..core.schema import TableSchema

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class TableStore:
    """
    In-memory table store.
    """

    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None,
                 schemas: Optional[Dict[str, TableSchema]] = None):
        self._tables: Dict[str, List[Row]] = dict(tables or {})
        self._schemas: Dict[str, TableSchema] = dict(schemas or {})

    @classmethod
    def from_directory(cls, data_dir: str) -> 'TableStore':
        """Load every ``*.json`` file in ``data_dir`` as a table"""
        if not os.path.isdir(data_dir):
            raise FileNotFoundError(f"Data directory '{data_dir}' does not exist")

        tables: Dict[str, List[Row]] = {}
        schemas: Dict[str, TableSchema] = {}

        for filename in sorted(os.listdir(data_dir)):
            name, ext = os.path.splitext(filename)
            if ext.lower() != '.json':
                continue

            with open(os.path.join(data_dir, filename), 'r') as f:
                data = json.load(f)

            if isinstance(data, dict):
                rows = data.get('rows', [])
                if data.get('schema'):
                    schemas[name] = TableSchema.from_columns(name, data['schema'])
            else:
                rows = data

            if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
                raise ValueError(f"{filename}: expected a list of row objects")

            tables[name] = rows
            logger.debug("Loaded table %s (%d rows) from %s", name, len(rows), filename)

        logger.info("Loaded %d table(s) from %s", len(tables), data_dir)
        return cls(tables, schemas)

    def resolve(self, name: str) -> str:
        """Return the stored name for ``name`` or raise UnknownTable"""
        if name in self._tables:
            return name
        lowered = name.lower()
        for table_name in self._tables:
            if table_name.lower() == lowered:
                return table_name
        raise UnknownTable(name)

    def table_exists(self, name: str) -> bool:
        """Check if table exists"""
        try:
            self.resolve(name)
        except UnknownTable:
            return False
        return True

    def get_rows(self, name: str) -> List[Row]:
        """Rows of a table, in stored order"""
        return self._tables[self.resolve(name)]

    def count(self, name: str) -> int:
        """Number of rows in a table"""
        return len(self.get_rows(name))

    def list_tables(self) -> List[str]:
        """List all table names"""
        return list(self._tables.keys())

    def get_table_schema(self, name: str) -> TableSchema:
        """Declared schema of a table, or one inferred from its rows"""
        table_name = self.resolve(name)
        schema = self._schemas.get(table_name)
        if schema is None:
            schema = TableSchema.infer(table_name, self._tables[table_name])
        return schema
