import base64
import json
import re

import pytest

from acelist.models import Configuration
from acelist.utils.config_codec import ConfigCodec, MalformedToken

DEFAULT_SOURCE = "http://default/list.m3u"


@pytest.fixture
def codec() -> ConfigCodec:
    return ConfigCodec(default_source=DEFAULT_SOURCE)


def _raw_token(payload) -> str:
    return base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii").rstrip("=")


@pytest.mark.parametrize(
    "config",
    [
        Configuration(source=DEFAULT_SOURCE),
        Configuration(source="http://other/list.m3u?a=1&b=2", substitution_target="10.0.0.5"),
        Configuration(source="https://ipfs.io/ipns/k2k4/data/listas/lista_iptv.m3u", substitution_target="192.168.18.50"),
        Configuration(source="http://listas.example/canales ñ.m3u", substitution_target="host.lan"),
    ],
)
def test_round_trip(codec, config):
    token = codec.encode(config)

    assert re.fullmatch(r"[A-Za-z0-9_-]+", token)
    assert codec.decode(token) == config


def test_missing_source_resolves_to_default(codec):
    config = codec.decode(_raw_token({"ip": "10.0.0.5"}))
    assert config == Configuration(source=DEFAULT_SOURCE, substitution_target="10.0.0.5")


def test_null_target_means_no_substitution(codec):
    config = codec.decode(_raw_token({"m3u": "http://a/list.m3u", "ip": None}))
    assert config.substitution_target is None


@pytest.mark.parametrize(
    "segment",
    [
        "manifest.json",
        "catalog",
        "",
        "abc",
        _raw_token([1, 2, 3]),
        _raw_token({"other": "field"}),
        _raw_token({"m3u": 5}),
        _raw_token({"m3u": "http://a", "ip": ["x"]}),
        base64.urlsafe_b64encode(b"\xff\xfe not utf8").decode("ascii").rstrip("="),
    ],
)
def test_malformed_tokens(codec, segment):
    with pytest.raises(MalformedToken):
        codec.decode(segment)
    assert codec.try_decode(segment) is None


def test_blank_target_is_normalized():
    assert Configuration(source="http://a", substitution_target="  ").substitution_target is None
    assert Configuration(source="http://a", substitution_target=" 10.0.0.5 ").substitution_target == "10.0.0.5"


def test_cache_key_distinguishes_targets():
    plain = Configuration(source="http://a")
    targeted = Configuration(source="http://a", substitution_target="10.0.0.5")
    assert plain.cache_key == "http://a::original"
    assert targeted.cache_key == "http://a::10.0.0.5"
