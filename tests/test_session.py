import base64
import json

import pytest

from conftest import FakeClock
from pinvault.auth.session import MODE_LEGACY, MODE_SIGNED, SessionCodec
from pinvault.errors import ConfigError

DAY_S = 24 * 60 * 60


def _legacy(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


@pytest.fixture(params=[MODE_SIGNED, MODE_LEGACY])
def codec_and_clock(request):
    clock = FakeClock()
    return SessionCodec(mode=request.param, secret="s3cret", clock=clock), clock


def test_issue_then_validate(codec_and_clock):
    codec, _ = codec_and_clock
    token = codec.issue()
    assert codec.validate(token)
    sess = codec.decode(token)
    assert sess.authenticated is True


def test_token_expires_after_24h(codec_and_clock):
    codec, clock = codec_and_clock
    token = codec.issue()
    clock.advance(seconds=DAY_S)
    assert codec.validate(token)  # exactly at the boundary
    clock.advance(ms=1)
    assert not codec.validate(token)


@pytest.mark.parametrize(
    "token",
    [
        None,
        "",
        "not a token",
        "%%%%",
        "eyJhdXRoZW50aWNhdGVkIjp0cnVl",  # truncated base64 JSON
        base64.b64encode(b"\xff\xfe\x00").decode(),
        base64.b64encode(b"[1, 2, 3]").decode(),
        base64.b64encode(b"NaN").decode(),
        "ünïcødé",
    ],
)
def test_undecodable_tokens_are_rejected_without_raising(codec_and_clock, token):
    codec, _ = codec_and_clock
    assert codec.validate(token) is False


@pytest.mark.parametrize(
    "payload",
    [
        {"authenticated": False, "timestamp": 1_700_000_000_000},
        {"authenticated": "true", "timestamp": 1_700_000_000_000},
        {"timestamp": 1_700_000_000_000},
        {"authenticated": True},
        {"authenticated": True, "timestamp": "1700000000000"},
        {"authenticated": True, "timestamp": True},
    ],
)
def test_legacy_payload_requires_both_fields(payload):
    codec = SessionCodec(mode=MODE_LEGACY, clock=FakeClock())
    assert not codec.validate(_legacy(payload))


def test_legacy_tokens_are_forgeable():
    clock = FakeClock()
    codec = SessionCodec(mode=MODE_LEGACY, clock=clock)
    forged = _legacy({"authenticated": True, "timestamp": clock.now})
    assert codec.validate(forged)


def test_signed_mode_rejects_forged_and_tampered_tokens():
    clock = FakeClock()
    codec = SessionCodec(mode=MODE_SIGNED, secret="s3cret", clock=clock)
    assert not codec.validate(_legacy({"authenticated": True, "timestamp": clock.now}))

    token = codec.issue()
    value, sig = token.rsplit(".", 1)
    tampered = value[:-1] + ("A" if value[-1] != "A" else "B")
    assert not codec.validate(f"{tampered}.{sig}")

    other = SessionCodec(mode=MODE_SIGNED, secret="another", clock=clock)
    assert not other.validate(token)


def test_signed_mode_requires_secret():
    with pytest.raises(ConfigError):
        SessionCodec(mode=MODE_SIGNED, secret=None)


def test_unknown_mode_is_a_config_error():
    with pytest.raises(ConfigError):
        SessionCodec(mode="jwt", secret="x")
