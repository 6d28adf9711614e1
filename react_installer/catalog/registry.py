"""Async client for npm registry version lookups.

Used by the package catalog to show the latest published version next to an
install command. Every method returns a structured ``RegistryResponse``
instead of raising, so a slow or offline registry never breaks the catalog.

Typical usage::

    client = RegistryClient()
    resp = await client.latest_version("zustand")
    if resp.success:
        print(resp.version)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from react_installer.config import InstallerConfig


class RegistryResponse(BaseModel):
    """Result of a registry lookup for one package."""

    package: str
    version: str | None = Field(default=None, description="Latest published version")
    success: bool = Field(default=True)
    error: str | None = Field(default=None, description="Error message on failure")


class RegistryClient:
    """Async client for the npm registry (``https://registry.npmjs.org``)."""

    def __init__(
        self,
        base_url: str = "https://registry.npmjs.org",
        timeout: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: InstallerConfig) -> "RegistryClient":
        return cls(base_url=config.registry.url, timeout=config.registry.timeout)

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    @staticmethod
    def _package_path(package: str) -> str:
        # Scoped names keep the leading '@' but encode the slash.
        return "/" + quote(package, safe="@") + "/latest"

    async def latest_version(self, package: str) -> RegistryResponse:
        """Return the ``latest`` dist-tag version of *package*."""
        try:
            async with self._client() as client:
                response = await client.get(self._package_path(package))
                if response.status_code == 404:
                    return RegistryResponse(
                        package=package,
                        success=False,
                        error=f"Package not found in registry: {package}",
                    )
                response.raise_for_status()
                data = response.json()
                return RegistryResponse(package=package, version=data.get("version"))
        except httpx.ConnectError:
            return RegistryResponse(
                package=package,
                success=False,
                error=f"Cannot connect to {self.base_url}. Check your network connection.",
            )
        except httpx.TimeoutException:
            return RegistryResponse(
                package=package,
                success=False,
                error=f"Registry request timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return RegistryResponse(
                package=package,
                success=False,
                error=f"Registry returned HTTP {exc.response.status_code}",
            )
        except httpx.HTTPError as exc:
            return RegistryResponse(
                package=package,
                success=False,
                error=f"Registry request failed: {exc}",
            )
        except ValueError as exc:
            return RegistryResponse(
                package=package,
                success=False,
                error=f"Invalid registry response: {exc}",
            )

    async def latest_versions(self, packages: list[str]) -> dict[str, RegistryResponse]:
        """Look up several packages concurrently."""
        results = await asyncio.gather(*(self.latest_version(p) for p in packages))
        return dict(zip(packages, results))
