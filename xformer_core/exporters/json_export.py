import json
from typing import Any, TextIO


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def dump_json(stream: TextIO, value: Any) -> None:
    """Pretty-print `value` (records with to_dict() included) followed by a newline."""
    stream.write(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))
    stream.write("\n")
