import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import numpy as np
import pandas as pd

from config import CONFIG

logger = logging.getLogger(__name__)

# ====================================================================

MENU_COLUMNS = CONFIG["menu_columns"]
NUMERIC_FIELDS = MENU_COLUMNS[1:-1]
LINE_SPLIT = re.compile(r"\r?\n")
FIELD_SPLIT = re.compile(r"[\t,]")


@dataclass
class MenuItem:
    name: str
    price: float
    calories: float
    protein: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sat_fat: float = 0.0
    sodium: float = 0.0
    tags: List[str] = field(default_factory=list)


def normalize_tag(s: str) -> str:
    return s.strip().lower()

def split_tags(cell: Any) -> List[str]:
    """Pipe-delimited tag string -> trimmed, lower-cased, non-empty labels."""
    return [t for t in (normalize_tag(tok) for tok in str(cell or "").split("|")) if t]

def record_from_fields(fields: Sequence[str]) -> Dict[str, Any]:
    """Map positional line fields onto the same keys a JSON item uses."""
    record: Dict[str, Any] = {c: (fields[i] if i < len(fields) else "")
                              for i, c in enumerate(MENU_COLUMNS[:-1])}
    tags_cell = fields[len(MENU_COLUMNS) - 1] if len(fields) >= len(MENU_COLUMNS) else ""
    record["tags"] = [normalize_tag(t) for t in tags_cell.split("|")] if tags_cell else []
    return record

def record_tags(record: Mapping[str, Any]) -> List[str]:
    raw_tags = record.get("tags")
    if isinstance(raw_tags, (list, tuple)):
        return [str(t).lower() for t in raw_tags]
    return split_tags(raw_tags)

def numeric_frame(records: List[Mapping[str, Any]]) -> pd.DataFrame:
    """
    One row per record, one float column per numeric field. Anything that is
    not a number reads as 0; infinities are kept so callers can decide.
    """
    df = pd.DataFrame({
        c: pd.Series([int(v) if isinstance(v, bool) else v for v in (r.get(c) for r in records)],
                     dtype=object)
        for c in NUMERIC_FIELDS
    })
    for c in NUMERIC_FIELDS:
        df[c] = pd.to_numeric(df[c], errors="coerce").fillna(0).astype(float)
    return df

def sanitize_items(records: Iterable[Any]) -> List[MenuItem]:
    """
    Coerce loosely-typed records into MenuItems, in input order.

    Records whose price or calories come out infinite are dropped; a missing
    name becomes the placeholder.
    """
    records = [rec if isinstance(rec, Mapping) else {} for rec in records]
    if not records:
        return []
    df = numeric_frame(records)
    df["name"] = [str(r.get("name") or CONFIG["placeholder_name"]) for r in records]
    keep = np.isfinite(df["price"]) & np.isfinite(df["calories"]) & (df["name"] != "")

    dropped = int((~keep).sum())
    if dropped:
        logger.debug("Dropped %d menu record(s) without a finite price/calories", dropped)

    items = []
    for idx, row in df[keep].iterrows():
        items.append(MenuItem(
            name=row["name"],
            price=float(row["price"]),
            calories=float(row["calories"]),
            protein=float(row["protein"]),
            fiber=float(row["fiber"]),
            sugar=float(row["sugar"]),
            sat_fat=float(row["satFat"]),
            sodium=float(row["sodium"]),
            tags=record_tags(records[idx]),
        ))
    return items

def parse_lines(text: str) -> List[Dict[str, Any]]:
    records = []
    for line in LINE_SPLIT.split(text):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = [p.strip() for p in FIELD_SPLIT.split(line)]
        if len(parts) < 3:
            continue
        records.append(record_from_fields(parts))
    return records

def parse_menu(text: str) -> List[MenuItem]:
    """
    Parse pasted menu text. A top-level JSON array is used as-is; anything
    else (bad JSON, a JSON object or scalar) is read as comma/tab separated
    lines: name,price,calories,protein,fiber,sugar,satFat,sodium,tags
    """
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError):
        parsed = None
    if isinstance(parsed, list):
        logger.debug("Menu parsed as JSON array with %d record(s)", len(parsed))
        return sanitize_items(parsed)

    records = parse_lines(text or "")
    logger.debug("Menu parsed as delimited lines with %d record(s)", len(records))
    return sanitize_items(records)

def filter_by_diet(items: List[MenuItem], diet: str) -> List[MenuItem]:
    if not diet or diet == "any":
        return list(items)
    return [it for it in items if diet in it.tags]

def items_frame(items: List[MenuItem]) -> pd.DataFrame:
    rows = [{
        "Name": it.name,
        "Price": it.price,
        "Calories": it.calories,
        "Protein": it.protein,
        "Fiber": it.fiber,
        "Sugar": it.sugar,
        "SatFat": it.sat_fat,
        "Sodium": it.sodium,
        "Tags": ", ".join(it.tags),
    } for it in items]
    columns = ["Name", "Price", "Calories", "Protein", "Fiber", "Sugar", "SatFat", "Sodium", "Tags"]
    return pd.DataFrame(rows, columns=columns)

def format_items(items: List[MenuItem]) -> str:
    if not items:
        return "No valid items found. Check your menu format."
    df = items_frame(items)
    return df.to_string(index=False, formatters={"Price": "${:.2f}".format})
