"""
Schema Module - Describes the columns of a table

Schemas are informational: the engine never validates rows against them.
They are either declared alongside a table (the bundled sample data does
this) or inferred from the rows themselves.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from .types import ColumnType, TypeValidator


@dataclass
class Column:
    """One column as shown by .schema and /api/tables/<name>"""
    name: str
    col_type: ColumnType
    primary_key: bool = False
    nullable: bool = True
    default: Any = None

    def __post_init__(self):
        # Primary keys are implicitly NOT NULL
        self.nullable = self.nullable and not self.primary_key

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Column':
        """Inverse of ``to_dict``; only ``column`` and ``type`` are required"""
        return cls(
            name=data['column'],
            col_type=TypeValidator.parse_type(data['type']),
            primary_key=data.get('primary', False),
            nullable=data.get('nullable', True),
            default=data.get('default'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'column': self.name,
            'type': str(self.col_type),
            'primary': self.primary_key,
            'nullable': self.nullable,
            'default': self.default,
        }


@dataclass
class TableSchema:
    """Ordered columns of a table; at most one is the primary key"""
    name: str
    columns: List[Column] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for column in self.columns:
            if column.name.lower() in seen:
                raise ValueError(f"Column '{column.name}' appears twice in table '{self.name}'")
            seen.add(column.name.lower())

        if sum(1 for column in self.columns if column.primary_key) > 1:
            raise ValueError(f"Table '{self.name}' declares more than one primary key")

    @property
    def primary_key(self) -> Optional[str]:
        return next((column.name for column in self.columns if column.primary_key), None)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'columns': [column.to_dict() for column in self.columns],
            'primary_key': self.primary_key,
        }

    @classmethod
    def from_columns(cls, name: str, columns: List[Dict[str, Any]]) -> 'TableSchema':
        """Build a schema from column descriptions.

        Each description looks like
        ``{'column': 'id', 'type': 'integer', 'primary': True, 'nullable': False}``.
        """
        return cls(name, [Column.from_dict(data) for data in columns])

    @classmethod
    def infer(cls, name: str, rows: List[Dict[str, Any]]) -> 'TableSchema':
        """Infer a schema from a table's rows.

        The column set comes from the first row; types and nullability are
        derived from every row's values. A column named ``id`` is taken as
        the primary key.
        """
        columns = []
        for col_name in (rows[0] if rows else {}):
            values = [row.get(col_name) for row in rows]
            columns.append(Column(
                name=col_name,
                col_type=TypeValidator.infer_type(values),
                primary_key=col_name.lower() == 'id',
                nullable=any(value is None for value in values),
            ))
        return cls(name, columns)
