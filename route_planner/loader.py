"""
route_planner/loader.py
───────────────────────
Read city coordinates from a text source.

File format
───────────
One city per line, `x,y`, in visiting-index order:

    0,0
    1,0
    # comments and blank lines are skipped
    1,1

Surrounding whitespace is ignored. Anything else on a line (a third
column, text, an empty field) is a malformed line and raises InputError
naming its line number. Non-finite values ("nan", "inf") parse as floats
here and are rejected later by the engine's own validation.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Union

from route_planner.shared.models import City
from tsp_aco.validation import InputError

logger = logging.getLogger(__name__)


def parse_cities(lines: Iterable[str]) -> List[City]:
    """
    Parse `x,y` lines into City models.

    Raises:
        InputError: on the first malformed line.
    """
    cities: List[City] = []
    for line_no, row in enumerate(csv.reader(lines), start=1):
        fields = [field.strip() for field in row]
        if not fields or not any(fields) or fields[0].startswith("#"):
            continue
        if len(fields) != 2:
            raise InputError(
                f"Line {line_no}: expected 'x,y', got {','.join(row)!r}"
            )
        try:
            cities.append(City(x=float(fields[0]), y=float(fields[1])))
        except ValueError as exc:
            raise InputError(
                f"Line {line_no}: coordinates are not numbers: {','.join(row)!r}"
            ) from exc
    return cities


def load_cities(path: Union[str, Path]) -> List[City]:
    """
    Read a coordinate file.

    Raises:
        InputError: file missing, unreadable, not UTF-8, or a malformed line.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8", newline="") as f:
            cities = parse_cities(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f"Cannot read city file {str(path)!r}: {exc}") from exc

    logger.info("Loaded %d cities from %s", len(cities), path)
    return cities
