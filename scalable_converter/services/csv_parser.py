"""Parser for Scalable Capital CSV transaction exports.

Scalable Capital exports are semicolon-delimited with European number
formatting, but re-saved files are frequently comma-delimited, so the
delimiter is detected from the header line.

Columns: date, time, status, reference, description, assetType, type,
isin, shares, price, amount, fee, tax, currency
"""

import csv
import logging
from dataclasses import dataclass, field
from io import StringIO

logger = logging.getLogger(__name__)

# Lower-cased CSV header -> RawTransaction attribute
COLUMN_MAP: dict[str, str] = {
    "date": "date",
    "time": "time",
    "status": "status",
    "reference": "reference",
    "description": "description",
    "assettype": "asset_type",
    "type": "type",
    "isin": "isin",
    "shares": "shares",
    "price": "price",
    "amount": "amount",
    "fee": "fee",
    "tax": "tax",
    "currency": "currency",
}

# Transaction types whose ISIN needs to be resolved to a ticker
RESOLVABLE_TYPE_MARKERS = ("buy", "sell", "dividend", "distribution", "savings plan", "sparplan")


@dataclass(frozen=True)
class RawTransaction:
    """One row of a Scalable Capital export, exactly as exported (trimmed)."""

    date: str = ""
    time: str = ""
    status: str = ""
    reference: str = ""
    description: str = ""
    asset_type: str = ""
    type: str = ""
    isin: str = ""
    shares: str = ""
    price: str = ""
    amount: str = ""
    fee: str = ""
    tax: str = ""
    currency: str = ""


@dataclass
class ParseResult:
    """Parsed transactions plus non-fatal structural errors."""

    transactions: list[RawTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _decode(content: bytes | str) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _strip_quotes(value: str) -> str:
    """Remove stray quote characters left over around free-text fields."""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def detect_delimiter(content: str) -> str:
    """Return ';' when the header line contains one, ',' otherwise."""
    first_line = content.split("\n", 1)[0]
    return ";" if ";" in first_line else ","


def parse_scalable_csv(content: bytes | str) -> ParseResult:
    """Parse Scalable Capital CSV content into RawTransaction rows.

    Malformed rows are reported in ``ParseResult.errors`` but never abort
    parsing; missing trailing fields are read as empty strings.
    """
    text = _decode(content)
    result = ParseResult()
    if not text.strip():
        return result

    delimiter = detect_delimiter(text)
    try:
        rows = [row for row in csv.reader(StringIO(text), delimiter=delimiter) if any(row)]
    except csv.Error as e:
        result.errors.append(f"Failed to parse CSV: {e}")
        return result

    if not rows:
        return result

    header = [column.strip().lower() for column in rows[0]]
    attribute_by_index = {
        index: COLUMN_MAP[column] for index, column in enumerate(header) if column in COLUMN_MAP
    }
    missing = set(COLUMN_MAP) - set(header)
    if missing:
        logger.warning(f"Scalable CSV is missing columns: {sorted(missing)}")

    for data_index, row in enumerate(rows[1:]):
        if len(row) != len(header):
            problem = "Too few fields" if len(row) < len(header) else "Too many fields"
            result.errors.append(
                f"Row {data_index + 2}: {problem}: expected {len(header)} fields "
                f"but parsed {len(row)}"
            )

        values = {attribute: "" for attribute in COLUMN_MAP.values()}
        for index, attribute in attribute_by_index.items():
            if index < len(row):
                values[attribute] = row[index].strip()

        values["reference"] = _strip_quotes(values["reference"])
        values["description"] = _strip_quotes(values["description"])
        result.transactions.append(RawTransaction(**values))

    logger.info(
        f"Parsed {len(result.transactions)} Scalable transactions "
        f"({len(result.errors)} parse errors, delimiter {delimiter!r})"
    )
    return result


def extract_unique_isins(transactions: list[RawTransaction]) -> list[str]:
    """Return the ISINs that need resolving, de-duplicated in first-seen order."""
    isins: dict[str, None] = {}
    for transaction in transactions:
        isin = transaction.isin.strip()
        if not isin:
            continue
        transaction_type = transaction.type.lower()
        if any(marker in transaction_type for marker in RESOLVABLE_TYPE_MARKERS):
            isins.setdefault(isin, None)
    return list(isins)
