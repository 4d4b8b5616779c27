"""Loading city coordinates from files and in-memory records."""

import json
from pathlib import Path
from typing import Iterable, List

import numpy as np
import pandas as pd

from .geometry import City


def _city_from_record(record, position: int) -> City:
    if isinstance(record, dict):
        name = record.get("name")
        x, y = record["x"], record["y"]
    else:
        values = list(record)
        if len(values) == 3:
            name, x, y = values
        elif len(values) == 2:
            name = None
            x, y = values
        else:
            raise ValueError(
                f"Record {position} must be (x, y) or (name, x, y), got {values!r}"
            )
    if name is None or (isinstance(name, float) and np.isnan(name)):
        name = str(position)
    x, y = float(x), float(y)
    if not (np.isfinite(x) and np.isfinite(y)):
        raise ValueError(f"Record {position} has non-finite coordinates")
    return City(name=str(name), x=x, y=y)


def cities_from_records(records: Iterable) -> List[City]:
    """
    Build cities from dicts with name/x/y keys or from (x, y) / (name, x, y)

    Cities without a name are labeled by their position in the input.
    """
    return [_city_from_record(record, i) for i, record in enumerate(records)]


def cities_from_frame(df: pd.DataFrame) -> List[City]:
    """Build cities from a frame with x and y columns and an optional name"""
    columns = {column.lower().strip(): column for column in df.columns}
    if "x" not in columns or "y" not in columns:
        raise ValueError(f"Expected x and y columns, got {list(df.columns)}")

    frame = pd.DataFrame(
        {
            "x": pd.to_numeric(df[columns["x"]], errors="raise"),
            "y": pd.to_numeric(df[columns["y"]], errors="raise"),
        }
    )
    if "name" in columns:
        frame["name"] = df[columns["name"]]
    else:
        frame["name"] = [str(i) for i in range(len(df))]

    return cities_from_records(frame[["name", "x", "y"]].to_dict("records"))


def load_cities(file_path: str, format: str = "auto") -> List[City]:
    """Load cities from a CSV or JSON file"""
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"City file not found: {file_path}")

    if format == "auto":
        format = path.suffix.lower()

    try:
        if format in [".csv", "csv"]:
            return cities_from_frame(pd.read_csv(file_path))
        elif format in [".json", "json"]:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict) and "cities" in data:
                data = data["cities"]
            return cities_from_records(data)
        else:
            raise ValueError(f"Unsupported format: {format}")
    except Exception as e:
        raise ValueError(f"Failed to load cities from {file_path}: {e}")
