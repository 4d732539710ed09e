"""
Storage key and public URL format.

Single source of truth: upload, invalidation and download signing all derive
keys and URLs through KeyCodec so they agree on which object a URL names.

Storage key:  {origin_path without slashes}/{logical_name}  (no leading slash)
Public URL:   {base_url}{relative_path}

When a cache behavior is resolved, the CDN prepends the storage origin's origin
path to every viewer request, so the relative path is the key with that prefix
removed. Without a CDN, the relative path is "/" + key.
"""

import fnmatch
import logging
import re

from .models import ResolvedConfig

logger = logging.getLogger(__name__)


def normalize_origin_path(origin_path: str | None) -> str:
    """Return origin path as "/segment[/segment]" or "" (no trailing slash)."""
    stripped = (origin_path or "").strip("/")
    return f"/{stripped}" if stripped else ""


def path_matches_pattern(path: str, pattern: str) -> bool:
    """
    CloudFront path-pattern match: * matches any run of characters, ? exactly one.
    Leading slashes are ignored on both sides; everything else is literal.
    """
    literal = pattern.lstrip("/").replace("[", "[[]")
    return fnmatch.fnmatchcase(path.lstrip("/"), literal)


class KeyCodec:
    """Translate between storage keys and public URLs for one resolved configuration."""

    def __init__(self, config: ResolvedConfig) -> None:
        self._config = config
        self._origin_path = normalize_origin_path(config.origin_path)
        self._origin_prefix_re = (
            re.compile(f"^{re.escape(self._origin_path)}(?=/|$)") if self._origin_path else None
        )

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def key_from_logical_name(self, logical_name: str) -> str:
        """Prefix the logical filename with the storage origin's path, if any."""
        if not logical_name:
            return ""
        if self._origin_path:
            return f"{self._origin_path.lstrip('/')}/{logical_name}"
        return logical_name

    def key_to_url(self, key: str, relative: bool = False) -> str:
        """
        Build the public URL for a key.

        Args:
            key: Storage key (bucket-root relative).
            relative: Return only the path (e.g. for invalidation) instead of base_url + path.
        """
        relative_path = f"/{key}"
        behavior = self._config.cache_behavior
        if behavior is not None:
            if self._origin_prefix_re is not None:
                relative_path = self._origin_prefix_re.sub("", relative_path, count=1) or "/"
            if not behavior.is_wildcard and not path_matches_pattern(
                relative_path, behavior.path_pattern
            ):
                logger.warning(
                    "Path '%s' is not routed by cache behavior path pattern '%s'",
                    relative_path,
                    behavior.path_pattern,
                )
        if relative:
            return relative_path
        return f"{self._config.base_url}{relative_path}"

    def url_to_key(self, url: str) -> str:
        """Inverse of key_to_url: accepts an absolute URL under base_url or a relative path."""
        path = url
        base_url = self._config.base_url
        if base_url and path.startswith(base_url):
            path = path[len(base_url) :]
        if self._config.cache_behavior is not None and self._origin_path:
            path = f"{self._origin_path}{path}"
        if path.startswith("/"):
            path = path[1:]
        return path
