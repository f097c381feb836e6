"""Parameter payloads passed to the worker on its command line.

Parameters travel as a JSON array wrapped in standard base64, so the payload
is a single argument made of ``[A-Za-z0-9+/=]`` only. Only values that come
back from JSON unchanged are accepted: None, bool, int, float, str, lists and
dicts with string keys. The top-level sequence itself may be any sequence and
decodes as a list.
"""
import base64
import binascii
import json
from typing import Any, List, Sequence

from .errors import CodecError

_SCALARS = (type(None), bool, int, float, str)


def _check(value: Any, path: str) -> None:
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise CodecError(f"Parameters are not serializable: dict key {key!r} at {path} is not a string")
            _check(item, f"{path}[{key!r}]")
        return
    raise CodecError(f"Parameters are not serializable: {type(value).__name__} at {path}")


def encode(parameters: Sequence[Any]) -> str:
    parameters = list(parameters)
    for i, value in enumerate(parameters):
        _check(value, f"parameters[{i}]")
    try:
        raw = json.dumps(parameters, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Parameters are not serializable: {exc}") from exc
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode(payload: str) -> List[Any]:
    try:
        raw = base64.b64decode(payload.encode("ascii"), validate=True)
        parameters = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise CodecError(f"Malformed parameter payload: {exc}") from exc
    if not isinstance(parameters, list):
        raise CodecError(f"Malformed parameter payload: expected a list, got {type(parameters).__name__}")
    return parameters
