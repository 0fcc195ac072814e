"""Tests for credential resolution from the docker config and keychain."""

import asyncio
import base64
import json

import pytest

from registry_sync.auth.credentials import CredentialResolver, parse_docker_config
from registry_sync.auth.keychain import InternetPassword, parse_security_output
from registry_sync.exceptions import PasswordNotFoundError, UnsupportedPlatformError
from registry_sync.models import Credential


def encode(account: str, password: str) -> str:
    return base64.b64encode(f"{account}:{password}".encode()).decode()


def write_config(path, data) -> None:
    path.write_text(json.dumps(data))


class FakeKeychain:
    """Keychain lookup recording queried services."""

    def __init__(self, passwords=None, error=None):
        self.passwords = passwords or {}
        self.error = error
        self.queries: list[str] = []

    async def __call__(self, service: str) -> InternetPassword:
        self.queries.append(service)
        if self.error is not None:
            raise self.error
        if service not in self.passwords:
            raise PasswordNotFoundError("Could not find password")
        return self.passwords[service]


def test_parse_docker_config():
    auth = encode("alice", "pw:with:colons")
    credentials, store = parse_docker_config(
        {
            "auths": {
                "https://index.docker.io/v1/": {"auth": auth},
                "gcr.io": {},
                "quay.io": {"auth": "%%%not-base64"},
            },
            "credsStore": "desktop",
        }
    )
    assert store == "desktop"
    assert credentials["https://index.docker.io/v1/"] == Credential(account="alice", basic_auth=auth)
    assert credentials["index.docker.io"].account == "alice"
    assert "gcr.io" not in credentials
    assert "quay.io" not in credentials


@pytest.mark.asyncio
async def test_static_credentials_take_precedence(tmp_path):
    config = tmp_path / "config.json"
    write_config(
        config,
        {"auths": {"registry.docker.io": {"auth": encode("bob", "s3cret")}}, "credsStore": "osxkeychain"},
    )
    keychain = FakeKeychain()
    resolver = CredentialResolver(config, keychain_lookup=keychain)

    credential = await resolver.resolve("registry.docker.io")

    assert credential.account == "bob"
    assert credential.basic_auth == encode("bob", "s3cret")
    assert keychain.queries == []


@pytest.mark.asyncio
async def test_keychain_fallback(tmp_path):
    config = tmp_path / "config.json"
    write_config(config, {"credsStore": "osxkeychain"})
    keychain = FakeKeychain({"ghcr.io": InternetPassword(account="carol", password="tok")})
    resolver = CredentialResolver(config, keychain_lookup=keychain)

    credential = await resolver.resolve("ghcr.io")

    assert credential == Credential(account="carol", basic_auth=encode("carol", "tok"))


@pytest.mark.asyncio
async def test_keychain_not_consulted_without_store(tmp_path):
    config = tmp_path / "config.json"
    write_config(config, {"auths": {}})
    keychain = FakeKeychain({"ghcr.io": InternetPassword(account="carol", password="tok")})
    resolver = CredentialResolver(config, keychain_lookup=keychain)

    assert await resolver.resolve("ghcr.io") is None
    assert keychain.queries == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [PasswordNotFoundError("missing"), UnsupportedPlatformError("linux")]
)
async def test_keychain_misses_are_cached(tmp_path, error):
    config = tmp_path / "config.json"
    write_config(config, {"credsStore": "desktop"})
    keychain = FakeKeychain(error=error)
    resolver = CredentialResolver(config, keychain_lookup=keychain)

    assert await resolver.resolve("registry.docker.io") is None
    assert await resolver.resolve("registry.docker.io") is None
    assert keychain.queries == ["registry.docker.io"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        None,
        "{not json",
        "[]",
        '{"auths": ["registry.docker.io"]}',
        '{"auths": {"registry.docker.io": "oops"}}',
        '{"auths": {"registry.docker.io": {"auth": 42}}, "credsStore": ["desktop"]}',
    ],
)
async def test_unreadable_config_means_no_credentials(tmp_path, content):
    config = tmp_path / "config.json"
    if content is not None:
        config.write_text(content)
    resolver = CredentialResolver(config)
    assert await resolver.resolve("registry.docker.io") is None


def test_parse_security_output_quoted_password():
    stdout = 'keychain: "/Users/me/Library/Keychains/login.keychain-db"\n    "acct"<blob>="dave"\n'
    stderr = 'password: "plain-password"\n'
    assert parse_security_output(stdout, stderr) == InternetPassword(
        account="dave", password="plain-password"
    )


def test_parse_security_output_hex_password():
    stdout = '    "acct"<blob>="erin"\n'
    stderr = 'password: 0x70617373576974685C  "passWith\\134"\n'
    assert parse_security_output(stdout, stderr).password == "passWith\\"


def test_parse_security_output_without_password():
    with pytest.raises(PasswordNotFoundError):
        parse_security_output('"acct"<blob>="x"', "")


def test_parse_docker_config_skips_malformed_entries():
    auth = encode("frank", "pw")
    credentials, store = parse_docker_config(
        {"auths": {"bad.io": "oops", "ok.io": {"auth": auth}, "null.io": None}, "credsStore": 7}
    )
    assert list(credentials) == ["ok.io"]
    assert store is None


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_keychain_query(tmp_path):
    config = tmp_path / "config.json"
    write_config(config, {"credsStore": "osxkeychain"})
    keychain = FakeKeychain({"ghcr.io": InternetPassword(account="carol", password="tok")})
    resolver = CredentialResolver(config, keychain_lookup=keychain)

    first, second = await asyncio.gather(resolver.resolve("ghcr.io"), resolver.resolve("ghcr.io"))

    assert first == second == Credential(account="carol", basic_auth=encode("carol", "tok"))
    assert keychain.queries == ["ghcr.io"]
