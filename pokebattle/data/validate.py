"""Read a JSON document and check it against a schema under ROOT/schema."""
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema

from pokebattle.core.errors import DataLoadError
from pokebattle.core.paths import SCHEMA


@lru_cache(maxsize=None)
def _schema(name: str) -> Dict[str, Any]:
    path = SCHEMA / f"{name}.schema.json"
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(str(path), str(e)) from e


def load_validated_json(path: Path, schema_name: str) -> Any:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(str(path), str(e)) from e
    try:
        jsonschema.validate(raw, _schema(schema_name))
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise DataLoadError(str(path), f"schema: {where}: {e.message}") from e
    return raw
