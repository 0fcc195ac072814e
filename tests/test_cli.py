"""Tests for the command line entry point."""

import json

import pytest
import yaml

from registry_sync import cli
from registry_sync.core.registry_client import RegistryClient
from registry_sync.operations.manifests import manifest_url
from registry_sync.reference import parse_reference
from registry_sync.sync.processor import ItemError
from tests.helpers import FakeImageStore, FakeResponse, FakeSession, record

CHALLENGE = 'Bearer realm="https://auth.docker.io/token",service="registry.docker.io"'
OLD = "redis@sha256:" + "1" * 64
NEW = "redis@sha256:" + "2" * 64


def _manifest(tmp_path, *images):
    path = tmp_path / "docker-compose.yml"
    services = {f"svc{i}": {"image": image} for i, image in enumerate(images)}
    path.write_text(yaml.safe_dump({"services": services}))
    return path


class TestArguments:
    """Test argument parsing and exit codes."""

    def test_help_exits_with_one(self, capsys):
        assert cli.main(["--help"]) == 1
        assert "--report-only" in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [["--cpu-count", "0"], ["--cpu-count", "x"], ["--bogus"]])
    def test_invalid_arguments(self, argv, capsys):
        assert cli.main(argv) == 1
        assert "error" in capsys.readouterr().err

    def test_config_from_args(self):
        args = cli.build_parser().parse_args(["--dry-run", "--cpu-count", "4"])
        config = cli.config_from_args(args)
        assert config.dry_run is True
        assert config.report_only is False
        assert config.concurrency == 4

    @pytest.mark.asyncio
    async def test_single_image_overrides_manifests(self):
        args = cli.build_parser().parse_args(["ignored.yml", "--image", "redis:6"])
        assert await cli.resolve_references(args) == ["redis:6"]

    @pytest.mark.asyncio
    async def test_manifest_references(self, tmp_path):
        path = _manifest(tmp_path, "redis:6", "nginx")
        args = cli.build_parser().parse_args([str(path)])
        assert await cli.resolve_references(args) == ["redis:6", "nginx"]


def test_missing_manifest_is_a_startup_error(tmp_path):
    assert cli.main([str(tmp_path / "missing.yml")]) == 1


def test_item_failures_still_exit_with_zero(tmp_path, monkeypatch):
    path = _manifest(tmp_path, "redis:6")
    seen = {}

    async def fake_run_sync(config, references, store=None, registry=None):
        seen["references"] = references
        seen["config"] = config
        return [ItemError(index=0, slug="redis:6", error=RuntimeError("boom"))]

    monkeypatch.setattr(cli, "run_sync", fake_run_sync)

    assert cli.main([str(path), "--report-only", "--cpu-count", "2"]) == 0
    assert seen["references"] == ["redis:6"]
    assert seen["config"].report_only is True
    assert seen["config"].concurrency == 2


@pytest.mark.asyncio
async def test_run_sync_against_registry(sync_config, no_credentials):
    identity = parse_reference("redis:6")
    session = FakeSession(
        {
            "https://registry-1.docker.io/v2/": FakeResponse(401, {"WWW-Authenticate": CHALLENGE}),
            "https://auth.docker.io/token": FakeResponse(200, {}, json.dumps({"token": "t"}).encode()),
            manifest_url(identity): FakeResponse(200, {"Docker-Content-Digest": NEW.split("@")[1]}),
        }
    )
    store = FakeImageStore(images={"redis:6": record(OLD, 100)}, remote={"redis:6": record(NEW, 120)})
    registry = RegistryClient(sync_config, session=session, credentials=no_credentials)

    errors = await cli.run_sync(sync_config, ["redis:6"], store=store, registry=registry)

    assert errors == []
    assert store.images["redis:6"].digest == NEW
    assert store.mutating_calls == [
        ("tag", "redis:6"),
        ("pull", "redis:6"),
        ("remove_tag", "redis:backup"),
    ]
    assert len(session.requests_to("https://registry-1.docker.io/v2/")) == 1
    token_request = session.requests_to("https://auth.docker.io/token")[0]
    assert token_request["params"]["scope"] == "repository:library/redis:pull"
    # A session passed in is owned by the caller
    assert session.closed is False
