from __future__ import annotations

import json
from typing import Any, List

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for the ticketing store."""

    pass


def dump_json_list(values: List[Any]) -> str:
    """Encode a list column value; the order of elements is preserved."""
    return json.dumps(list(values), separators=(",", ":"))
