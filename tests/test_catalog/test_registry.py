"""Unit tests for RegistryClient (react_installer.catalog.registry).

All HTTP traffic goes through ``httpx.MockTransport``.

Tests cover:
- latest_version success, 404, HTTP errors, connection errors, timeouts,
  malformed JSON
- Scoped package path encoding
- latest_versions concurrency result mapping
- from_config
"""

from __future__ import annotations

import typing

import httpx
import pytest

from react_installer.catalog import RegistryClient, RegistryResponse
from react_installer.config import InstallerConfig, RegistryConfig

VERSIONS = {
    "/zustand/latest": "4.5.2",
    "/@mui/material/latest": "5.15.14",
}


def _registry_handler(request: httpx.Request) -> httpx.Response:
    version = VERSIONS.get(request.url.path)
    if version is None:
        return httpx.Response(404, json={"error": "Not found"})
    return httpx.Response(200, json={"name": request.url.path.split("/latest")[0][1:], "version": version})


def _client(handler) -> RegistryClient:
    return RegistryClient(base_url="https://registry.test", transport=httpx.MockTransport(handler))


class TestLatestVersion:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self):
        resp = await _client(_registry_handler).latest_version("zustand")
        assert resp == RegistryResponse(package="zustand", version="4.5.2")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_scoped_package(self):
        resp = await _client(_registry_handler).latest_version("@mui/material")
        assert resp.success is True
        assert resp.version == "5.15.14"

    @pytest.mark.unit
    def test_scoped_path_encodes_slash(self):
        assert RegistryClient._package_path("@mui/material") == "/@mui%2Fmaterial/latest"
        assert RegistryClient._package_path("zustand") == "/zustand/latest"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_found(self):
        resp = await _client(_registry_handler).latest_version("left-pad-2")
        assert resp.success is False
        assert resp.version is None
        assert "not found" in resp.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_server_error(self):
        resp = await _client(lambda request: httpx.Response(503)).latest_version("zustand")
        assert resp.success is False
        assert resp.error == "Registry returned HTTP 503"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        resp = await _client(handler).latest_version("zustand")
        assert resp.success is False
        assert "Cannot connect" in resp.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        resp = await _client(handler).latest_version("zustand")
        assert resp.success is False
        assert "timed out" in resp.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_json(self):
        resp = await _client(lambda request: httpx.Response(200, text="<html>")).latest_version("zustand")
        assert resp.success is False
        assert resp.error.startswith("Invalid registry response")


class TestLatestVersions:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_maps_each_package(self):
        results = await _client(_registry_handler).latest_versions(["zustand", "@mui/material", "nope"])

        assert list(results) == ["zustand", "@mui/material", "nope"]
        assert results["zustand"].version == "4.5.2"
        assert results["@mui/material"].version == "5.15.14"
        assert results["nope"].success is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty(self):
        assert await _client(_registry_handler).latest_versions([]) == {}


class TestFromConfig:
    @pytest.mark.unit
    def test_from_config(self):
        config = InstallerConfig(registry=RegistryConfig(url="http://localhost:4873/", timeout=3))
        client = RegistryClient.from_config(config)
        assert client.base_url == "http://localhost:4873"
        assert client.timeout == 3

    @pytest.mark.unit
    def test_from_config_annotated(self):
        hints = typing.get_type_hints(
            RegistryClient.from_config, localns={"InstallerConfig": InstallerConfig}
        )
        assert hints["config"] is InstallerConfig
