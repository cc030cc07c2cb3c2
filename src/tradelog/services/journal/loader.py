"""Journal file loader.

Reads exported journal files into validated TradeRecord models.

Supported formats (chosen by file suffix):
  - ``.json``: a list of trade objects, or an object with a ``trades`` key
  - ``.csv``: one trade per row with a header line

CSV conventions:
  - Empty cells mean "not set"; the field takes its default
  - ``strategies``: ``id:name`` pairs separated by ``;``
    (``s1:Breakout;s2:Reversal``). An entry without ``:`` uses the same text
    for id and name.
  - ``tags``: values separated by ``;``

Files are read as UTF-8; a leading byte order mark is ignored. Numbers in
JSON are read as Decimal so that prices and P&L never pass through float.

Example:
    >>> trades = load_trades(Path("exports/trades.csv"))
    >>> len(trades)
    128
"""

import csv
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tradelog.libraries.performance.models import TradeRecord
from tradelog.system import LoggerFactory

logger = LoggerFactory.get_logger()

SUPPORTED_SUFFIXES = (".json", ".csv")

_LIST_SEPARATOR = ";"
_STRATEGY_SEPARATOR = ":"


class TradeLoadError(ValueError):
    """Raised when a journal file cannot be turned into trades.

    Attributes:
        path: File being loaded
        row: 1-based record number within the file, if the problem is in a record
        field: Offending field name, if known
    """

    def __init__(
        self,
        message: str,
        path: Path | str,
        row: int | None = None,
        field: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.row = row
        self.field = field
        self.reason = message

        location = str(self.path)
        if row is not None:
            location += f", row {row}"
        if field is not None:
            location += f", field '{field}'"
        super().__init__(f"{location}: {message}")


def load_trades(path: Path | str) -> list[TradeRecord]:
    """
    Load and validate all trades from a journal file.

    Args:
        path: JSON or CSV journal export

    Returns:
        Trades in file order

    Raises:
        TradeLoadError: If the file is missing, has an unsupported suffix,
            cannot be read or parsed, or contains an invalid trade
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()

    if suffix not in SUPPORTED_SUFFIXES:
        raise TradeLoadError(
            f"unsupported journal format '{file_path.suffix}' (expected one of {', '.join(SUPPORTED_SUFFIXES)})",
            file_path,
        )
    if not file_path.is_file():
        raise TradeLoadError("file not found", file_path)

    if suffix == ".json":
        rows = _read_json_rows(file_path)
    else:
        rows = _read_csv_rows(file_path)

    trades = [_to_trade(row, file_path, index) for index, row in enumerate(rows, start=1)]

    if not trades:
        logger.warning("journal_loader.empty", path=str(file_path))
    else:
        logger.info(
            "journal_loader.loaded",
            path=str(file_path),
            format=suffix.lstrip("."),
            trades=len(trades),
        )

    return trades


def _to_trade(row: Any, path: Path, index: int) -> TradeRecord:
    """Validate one raw record, reporting failures with their location."""
    if not isinstance(row, dict):
        raise TradeLoadError(f"expected an object, got {type(row).__name__}", path, row=index)

    try:
        return TradeRecord.model_validate(row)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise TradeLoadError(error["msg"], path, row=index, field=field) from e


def _read_json_rows(path: Path) -> list[Any]:
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            data = json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise TradeLoadError(f"invalid JSON at line {e.lineno}: {e.msg}", path) from e
    except UnicodeDecodeError as e:
        raise TradeLoadError(f"file is not valid UTF-8 (byte {e.start})", path) from e
    except OSError as e:
        raise TradeLoadError(f"cannot read file: {e.strerror or e}", path) from e

    if isinstance(data, dict) and "trades" in data:
        data = data["trades"]

    if not isinstance(data, list):
        raise TradeLoadError("expected a list of trades or an object with a 'trades' key", path)

    return data


def _read_csv_rows(path: Path) -> list[dict[str, Any]]:
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            rows = _parse_csv(csv.DictReader(f), path)
    except UnicodeDecodeError as e:
        raise TradeLoadError(f"file is not valid UTF-8 (byte {e.start})", path) from e
    except csv.Error as e:
        raise TradeLoadError(f"invalid CSV: {e}", path) from e
    except OSError as e:
        raise TradeLoadError(f"cannot read file: {e.strerror or e}", path) from e

    logger.debug("journal_loader.csv_parsed", path=str(path), rows=len(rows))
    return rows


def _parse_csv(reader: csv.DictReader, path: Path) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    if reader.fieldnames is None:
        return rows

    for raw in reader:
        row: dict[str, Any] = {}
        for key, value in raw.items():
            if key is None:
                raise TradeLoadError("row has more cells than the header", path, row=len(rows) + 1)
            cell = value.strip() if isinstance(value, str) else value
            if cell in (None, ""):
                continue
            row[key.strip()] = cell

        if "strategies" in row:
            row["strategies"] = _parse_strategies(row["strategies"])
        if "tags" in row:
            row["tags"] = _split_list(row["tags"])

        rows.append(row)

    return rows


def _split_list(cell: str) -> list[str]:
    return [part.strip() for part in cell.split(_LIST_SEPARATOR) if part.strip()]


def _parse_strategies(cell: str) -> list[dict[str, str]]:
    """Parse ``id:name;id:name`` into strategy tag dicts."""
    strategies = []
    for entry in _split_list(cell):
        strategy_id, _, name = entry.partition(_STRATEGY_SEPARATOR)
        strategy_id = strategy_id.strip()
        strategies.append({"id": strategy_id, "name": name.strip() or strategy_id})
    return strategies
