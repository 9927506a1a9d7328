"""Version resolvers for the supported dependency ecosystems.

A resolver is an awaitable callable turning a dependency reference into
a ``(current_version, latest_version)`` pair:

* :class:`NpmResolver` — bare npm package name → ``(None, latest)``.
  The current version comes from the manifest, never from the lookup.
* :class:`DenoLandResolver` — ``https://deno.land/x/mod@1.0.0/mod.ts``
  → ``("1.0.0", latest)``.
* :class:`GitHubReleaseResolver` —
  ``https://raw.githubusercontent.com/owner/repo/v1.0.0/mod.ts``
  → ``("v1.0.0", latest release)``.
* :class:`DenoURLResolver` — dispatches ``npm:`` specifiers and URLs to
  the three above. Unknown hosts and malformed URLs resolve to
  ``(None, None)`` without touching the network.

Each ecosystem resolver owns a :class:`~depscout.core.cache.VersionCache`,
so a given package is looked up at most once per session. Upstream
failures signalled by an HTTP status are cached as ``None``; transport
failures raise :class:`~depscout.exceptions.NetworkError`.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Tuple
from urllib.parse import quote

import httpx

from depscout.models import VersionPair
from depscout.core.cache import VersionCache
from depscout.utils.http import HTTPClient
from depscout.utils.github import GitHubClient
from depscout.utils.logger import get_logger
from depscout.utils.version_utils import clean
from depscout.constants import (
    DENO_LAND_API,
    DENO_LAND_HOST,
    DENO_LAND_THIRD_PARTY_PREFIX,
    GITHUB_RAW_HOST,
    NPM_REGISTRY_API,
    NPM_SPECIFIER_PREFIX,
)

logger = get_logger("resolvers")

#: Any callable resolving a reference into a version pair.
Resolver = Callable[[str], Awaitable[VersionPair]]

__all__ = [
    "Resolver",
    "NpmResolver",
    "DenoLandResolver",
    "GitHubReleaseResolver",
    "DenoURLResolver",
    "decompose_package_name_version",
]


def decompose_package_name_version(reference: str) -> Tuple[str, str]:
    """Split ``name@version`` on the last ``@`` that is not the first character.

    Examples:
        >>> decompose_package_name_version("package@1.0.0")
        ('package', '1.0.0')
        >>> decompose_package_name_version("@scope/package@1.0.0")
        ('@scope/package', '1.0.0')
        >>> decompose_package_name_version("@scope/package")
        ('@scope/package', '')
    """
    index = reference.rfind("@")
    if index <= 0:
        return reference, ""
    return reference[:index], reference[index + 1 :]


def _path_segments(url: httpx.URL) -> list:
    return url.path.split("/")[1:]


class NpmResolver:
    """Resolve npm package names through the registry's ``latest`` dist-tag.

    Args:
        http_client: Shared HTTP client.
        cache: Cache keyed by package name; a fresh one if omitted.
        registry_url: Metadata URL template with a ``{package}`` field.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        cache: Optional[VersionCache] = None,
        registry_url: str = NPM_REGISTRY_API,
    ) -> None:
        self.http_client = http_client
        self.cache = cache if cache is not None else VersionCache("npm")
        self.registry_url = registry_url

    async def __call__(self, package_name: str) -> VersionPair:
        latest = await self.cache.get_or_fetch(
            package_name, lambda: self._fetch_latest(package_name)
        )
        return None, latest

    async def _fetch_latest(self, package_name: str) -> Optional[str]:
        # Scoped names keep their "@" but escape the "/"
        url = self.registry_url.format(package=quote(package_name, safe="@"))
        data = await self.http_client.get_json(url)
        if not isinstance(data, dict):
            logger.debug("npm package %s not found", package_name)
            return None

        latest = (data.get("dist-tags") or {}).get("latest")
        return latest if isinstance(latest, str) else None


class DenoLandResolver:
    """Resolve deno.land module URLs through the apiland metadata service.

    Both ``/x/<module>@<version>/...`` and ``/<std>@<version>/...`` paths
    are understood. The cache is keyed by module name, so every version
    of a module shares one lookup.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        cache: Optional[VersionCache] = None,
        api_url: str = DENO_LAND_API,
    ) -> None:
        self.http_client = http_client
        self.cache = cache if cache is not None else VersionCache("deno.land")
        self.api_url = api_url

    async def __call__(self, reference: str) -> VersionPair:
        return await self.resolve_url(httpx.URL(reference))

    async def resolve_url(self, url: httpx.URL) -> VersionPair:
        segments = _path_segments(url)
        if segments and segments[0] == DENO_LAND_THIRD_PARTY_PREFIX:
            segments = segments[1:]
        module_ref = segments[0] if segments else ""

        module_name, module_version = decompose_package_name_version(module_ref)
        if not module_name:
            return module_version, None

        latest = await self.cache.get_or_fetch(
            module_name, lambda: self._fetch_latest(module_name)
        )
        return module_version, latest

    async def _fetch_latest(self, module_name: str) -> Optional[str]:
        data = await self.http_client.get_json(self.api_url.format(package=module_name))
        if not isinstance(data, dict):
            logger.debug("deno.land module %s not found", module_name)
            return None

        latest = data.get("latest_version")
        return latest if isinstance(latest, str) else None


class GitHubReleaseResolver:
    """Resolve raw.githubusercontent.com URLs against the latest release.

    The third path segment (tag or branch) is reported as the current
    version as-is. The latest release tag is cleaned into a semantic
    version; tags that are not versions resolve to ``None``.
    """

    def __init__(
        self,
        github: GitHubClient,
        cache: Optional[VersionCache] = None,
    ) -> None:
        self.github = github
        self.cache = cache if cache is not None else VersionCache("github")

    async def __call__(self, reference: str) -> VersionPair:
        return await self.resolve_url(httpx.URL(reference))

    async def resolve_url(self, url: httpx.URL) -> VersionPair:
        segments = _path_segments(url)
        if len(segments) < 2 or not segments[0] or not segments[1]:
            return None, None

        owner, repo = segments[0], segments[1]
        ref = segments[2] if len(segments) > 2 and segments[2] else None

        latest = await self.cache.get_or_fetch(
            f"{owner}/{repo}", lambda: self._fetch_latest(owner, repo)
        )
        return ref, latest

    async def _fetch_latest(self, owner: str, repo: str) -> Optional[str]:
        release = await self.github.get_latest_release(owner, repo)
        if not release:
            return None

        tag = release.get("tag_name") or ""
        latest = clean(tag)
        if latest is None:
            logger.debug("Release tag %r of %s/%s is not a version", tag, owner, repo)
        return latest


class DenoURLResolver:
    """Dispatch Deno-style module specifiers to the matching resolver.

    Args:
        npm: Resolver used for ``npm:`` specifiers.
        deno_land: Resolver used for ``deno.land`` URLs.
        github: Resolver used for ``raw.githubusercontent.com`` URLs.
    """

    def __init__(
        self,
        npm: NpmResolver,
        deno_land: DenoLandResolver,
        github: GitHubReleaseResolver,
    ) -> None:
        self.npm = npm
        self.deno_land = deno_land
        self.github = github

    async def __call__(self, reference: str) -> VersionPair:
        if reference.startswith(NPM_SPECIFIER_PREFIX):
            package_name, package_version = decompose_package_name_version(
                reference[len(NPM_SPECIFIER_PREFIX) :]
            )
            _, latest = await self.npm(package_name)
            return package_version, latest

        try:
            url = httpx.URL(reference)
        except httpx.InvalidURL:
            logger.debug("Ignoring malformed URL %r", reference)
            return None, None

        if not url.is_absolute_url:
            logger.debug("Ignoring relative reference %r", reference)
            return None, None

        if url.host == DENO_LAND_HOST:
            return await self.deno_land.resolve_url(url)
        if url.host == GITHUB_RAW_HOST:
            return await self.github.resolve_url(url)

        logger.debug("No resolver for host %r", url.host)
        return None, None
