"""
Data Types Module - Column types and value coercion for loosely typed rows

Rows hold whatever the caller supplied (str, int, float, None), so the engine
never converts stored values. It only coerces them at comparison time:
numbers compare numerically, everything else as text.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union
import re


Number = Union[int, float]

# Sentinel for a field that is not present in a row
MISSING = object()

NUMBER_PATTERN = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$')
INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIMESTAMP_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?')
TYPE_DECLARATION = re.compile(r"^\s*([A-Za-z]+)\s*(?:\(\s*(\d+)\s*(?:,\s*\d+\s*)?\))?\s*$")


class DataType(Enum):
    """Column data types reported by table schemas"""
    INTEGER = auto()
    NUMERIC = auto()
    VARCHAR = auto()
    TEXT = auto()
    BOOLEAN = auto()
    DATE = auto()
    TIMESTAMP = auto()


TYPE_NAMES = {
    "INTEGER": DataType.INTEGER, "INT": DataType.INTEGER, "BIGINT": DataType.INTEGER,
    "SERIAL": DataType.INTEGER,
    "NUMERIC": DataType.NUMERIC, "DECIMAL": DataType.NUMERIC, "FLOAT": DataType.NUMERIC,
    "REAL": DataType.NUMERIC, "DOUBLE": DataType.NUMERIC,
    "VARCHAR": DataType.VARCHAR, "CHAR": DataType.VARCHAR,
    "TEXT": DataType.TEXT, "STRING": DataType.TEXT,
    "BOOLEAN": DataType.BOOLEAN, "BOOL": DataType.BOOLEAN,
    "DATE": DataType.DATE,
    "TIMESTAMP": DataType.TIMESTAMP, "DATETIME": DataType.TIMESTAMP,
}


@dataclass
class ColumnType:
    """Column type with optional size constraint (for VARCHAR)"""
    dtype: DataType
    size: Optional[int] = None  # For VARCHAR(n)

    def __str__(self) -> str:
        if self.dtype == DataType.VARCHAR and self.size:
            return f"varchar({self.size})"
        return self.dtype.name.lower()


class TypeValidator:
    """Parses declared column types and infers them from sample values"""

    @staticmethod
    def parse_type(type_str: str) -> ColumnType:
        """Parse a declared type such as ``integer``, ``varchar(100)`` or ``numeric(10, 2)``"""
        declaration = TYPE_DECLARATION.match(type_str or "")
        dtype = TYPE_NAMES.get(declaration.group(1).upper()) if declaration else None
        if dtype is None:
            raise ValueError(f"Unknown data type: {type_str}")

        # Only VARCHAR keeps its size; NUMERIC precision is not tracked
        size = declaration.group(2) if dtype == DataType.VARCHAR else None
        return ColumnType(dtype, int(size) if size else None)

    @staticmethod
    def infer_type(values: Iterable[Any]) -> ColumnType:
        """Infer a column type from the non-null values seen in a column"""
        seen = [value for value in values if value is not None]
        if not seen:
            return ColumnType(DataType.TEXT)

        if all(isinstance(value, bool) for value in seen):
            return ColumnType(DataType.BOOLEAN)
        if all(is_number(value) for value in seen):
            if all(isinstance(value, int) for value in seen):
                return ColumnType(DataType.INTEGER)
            return ColumnType(DataType.NUMERIC)

        if all(isinstance(value, str) for value in seen):
            if all(DATE_PATTERN.match(value) for value in seen):
                return ColumnType(DataType.DATE)
            if all(TIMESTAMP_PATTERN.match(value) for value in seen):
                return ColumnType(DataType.TIMESTAMP)
            if max(len(value) for value in seen) <= 255:
                return ColumnType(DataType.VARCHAR, 255)

        return ColumnType(DataType.TEXT)


def is_number(value: Any) -> bool:
    """True for int/float values (bools are not numbers here)"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> Optional[Number]:
    """Coerce a value to a number, or None when it does not look like one.

    Integers stay ``int``. Strings must be a complete decimal literal
    (surrounding whitespace allowed); NaN and infinities are rejected.
    """
    if is_number(value):
        if isinstance(value, float) and (value != value or value in (float('inf'), float('-inf'))):
            return None
        return value

    if isinstance(value, str):
        text = value.strip()
        if not NUMBER_PATTERN.match(text):
            return None
        if INTEGER_PATTERN.match(text):
            return int(text)
        return float(text)

    return None


def stringify(value: Any) -> str:
    """Render a value as text for grouping keys, sorting and CSV output"""
    if value is None or value is MISSING:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison used by ORDER BY.

    Two numbers compare numerically; any other pair is compared as text
    (null sorts as the empty string).
    """
    if is_number(a) and is_number(b):
        return (a > b) - (a < b)

    text_a, text_b = stringify(a), stringify(b)
    return (text_a > text_b) - (text_a < text_b)


class FieldResolver:
    """Looks up column references in rows.

    ``qualifiers`` maps a table name or alias (case-insensitive) to the key
    prefix its columns carry in joined rows, or to None when rows are not
    namespaced (single-table queries).
    """

    def __init__(self, qualifiers: Optional[Dict[str, Optional[str]]] = None):
        self.qualifiers = {name.lower(): prefix for name, prefix in (qualifiers or {}).items()}

    def lookup(self, row: Dict[str, Any], ref) -> Any:
        """Return the referenced value, or MISSING when the row lacks it"""
        if ref.table:
            prefix = self.qualifiers.get(ref.table.lower())
            if prefix is not None:
                value = find_field(row, f"{prefix}_{ref.column}")
                if value is not MISSING:
                    return value
        return find_field(row, ref.column)

    def output_key(self, ref) -> str:
        """Name a projected column reference gets in result rows"""
        if ref.table:
            prefix = self.qualifiers.get(ref.table.lower())
            if prefix is not None:
                return f"{prefix}_{ref.column}"
        return ref.column


def find_field(row: Dict[str, Any], key: str) -> Any:
    """Exact key match first, then a case-insensitive one"""
    if key in row:
        return row[key]
    lowered = key.lower()
    for name, value in row.items():
        if name.lower() == lowered:
            return value
    return MISSING
