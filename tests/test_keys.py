from types import SimpleNamespace

import pytest
import requests

from nixos_bootstrap.errors import PreconditionFailure
from nixos_bootstrap.lib import keys


def _response(text="", status=200):
    return SimpleNamespace(text=text, ok=200 <= status < 300, status_code=status, reason="OK" if status == 200 else "Not Found")


def test_parse_keys_skips_blank_lines_and_keeps_order():
    assert keys.parse_keys("a\n\n  \nb\r\nc\n") == ["a", "b", "c"]


def test_fetch_uses_identity_in_url(monkeypatch):
    seen = {}

    def fake_get(url, timeout):
        seen["url"] = url
        seen["timeout"] = timeout
        return _response("ssh-ed25519 AAAA one\nssh-rsa BBBB two\n")

    monkeypatch.setattr(keys.requests, "get", fake_get)

    assert keys.fetch_authorized_keys("octocat") == ["ssh-ed25519 AAAA one", "ssh-rsa BBBB two"]
    assert seen == {"url": "https://github.com/octocat.keys", "timeout": keys.FETCH_TIMEOUT}


def test_fetch_custom_url_template(monkeypatch):
    monkeypatch.setattr(keys.requests, "get", lambda url, timeout: _response(f"key-from {url}"))

    out = keys.fetch_authorized_keys("alice", url_template="https://keys.example.org/{user}/authorized")
    assert out == ["key-from https://keys.example.org/alice/authorized"]


def test_empty_body_is_precondition_failure(monkeypatch):
    monkeypatch.setattr(keys.requests, "get", lambda url, timeout: _response("\n  \n"))

    with pytest.raises(PreconditionFailure, match="No SSH keys"):
        keys.fetch_authorized_keys("nobody")


def test_http_error_is_precondition_failure(monkeypatch):
    monkeypatch.setattr(keys.requests, "get", lambda url, timeout: _response("Not Found", status=404))

    with pytest.raises(PreconditionFailure, match="404"):
        keys.fetch_authorized_keys("ghost")


def test_transport_error_is_precondition_failure(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("network unreachable")

    monkeypatch.setattr(keys.requests, "get", boom)

    with pytest.raises(PreconditionFailure, match="network unreachable"):
        keys.fetch_authorized_keys("octocat")
