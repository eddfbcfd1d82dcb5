import csv
import io
import json
from typing import Any, Dict, Iterable, List


class EmptyCollection(ValueError):
    pass


def discover_fields(records: Iterable[Dict[str, Any]]) -> List[str]:
    """Union of record keys, first record's order first, new keys appended."""
    fields: List[str] = []
    seen = set()
    for rec in records:
        for key in rec:
            if key not in seen:
                seen.add(key)
                fields.append(key)
    return fields


class _CsvBool(int):
    """Numeric to the csv writer, so it stays unquoted; prints as a JSON literal."""

    def __str__(self) -> str:
        return "true" if self else "false"


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return _CsvBool(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def to_csv(records: List[Any]) -> str:
    if not records:
        raise EmptyCollection("Nothing to export")

    rows = [r if isinstance(r, dict) else {"value": r} for r in records]
    fieldnames = discover_fields(rows)

    buf = io.StringIO()
    writer = csv.DictWriter(
        buf,
        fieldnames=fieldnames,
        restval="",
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({k: _cell(v) for k, v in row.items()})
    # No trailing newline after the last row
    return buf.getvalue().rstrip("\n")
