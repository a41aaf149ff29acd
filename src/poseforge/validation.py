"""Validation utilities for exported animation documents."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "animation.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, object]:
    return json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))


def validate_document_json(data: dict[str, object]) -> None:
    """Validate a versioned animation document against animation.schema.json.

    Parameters
    ----------
    data:
        The decoded document dictionary to validate.

    Raises
    ------
    jsonschema.ValidationError
        If the data does not conform to the schema.
    """
    jsonschema.validate(data, load_schema())
