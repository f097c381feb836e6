import base64
import re

import pytest

from jobrunner import codec
from jobrunner.errors import CodecError


@pytest.mark.parametrize(
    "params",
    [
        [],
        ["a", 1],
        [None, True, 2.5, "ünïcødé", {"nested": [1, 2, {"k": "v"}]}],
        ["spaces and 'quotes' ; rm -rf / && echo $HOME", "\n\t"],
    ],
)
def test_round_trip(params):
    assert codec.decode(codec.encode(params)) == params


def test_encoded_payload_is_a_single_safe_argument():
    payload = codec.encode(["line\nbreak", "-flag", "a b", {"x": "\x00"}])
    assert re.fullmatch(r"[A-Za-z0-9+/=]+", payload)


def test_top_level_tuple_comes_back_as_a_list():
    assert codec.decode(codec.encode(("a", 1))) == ["a", 1]


@pytest.mark.parametrize(
    "params",
    [
        [{1: "a"}],
        [{1: "a", True: "b"}],
        [{"outer": {2.5: "x"}}],
        [("nested", "tuple")],
        [{"a", "set"}],
        [b"bytes"],
    ],
)
def test_values_json_would_change_are_refused(params):
    with pytest.raises(CodecError, match="not serializable"):
        codec.encode(params)


def test_unserializable_parameters_raise():
    with pytest.raises(CodecError):
        codec.encode([object()])
    with pytest.raises(CodecError):
        codec.encode([float("nan")])


@pytest.mark.parametrize("payload", ["not base64!!", "W10", "", "ÿ"])
def test_malformed_payload_raises(payload):
    with pytest.raises(CodecError):
        codec.decode(payload)


def test_truncated_json_raises():
    payload = base64.b64encode(b'["a", 1').decode("ascii")
    with pytest.raises(CodecError):
        codec.decode(payload)


def test_payload_must_be_a_list():
    payload = base64.b64encode(b'{"a": 1}').decode("ascii")
    with pytest.raises(CodecError, match="expected a list"):
        codec.decode(payload)
