"""
Schema document fetchers.

Documents are read over HTTP with httpx or from a local checkout, then
parsed as YAML.  Any failure is reported as :class:`FetchError`; nothing is
retried.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import httpx
import yaml

from tileschema_core.exceptions import FetchError

from .config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, GeneratorConfig

logger = logging.getLogger(__name__)

_BOOL_TAG = "tag:yaml.org,2002:bool"


class SchemaLoader(yaml.SafeLoader):
    """
    SafeLoader that only reads ``true``/``false`` as booleans.

    YAML 1.1 words such as ``yes``, ``no``, ``on`` and ``off`` stay strings:
    they are tag values (``building: yes``) and language codes (``no``).
    """


SchemaLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SchemaLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def load_yaml(text: str, reference: str) -> Any:
    """Parse *text*; anchors and aliases are resolved."""
    try:
        return yaml.load(text, Loader=SchemaLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise FetchError(reference, f"invalid YAML: {exc}") from exc


def is_url(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))


class HttpDocumentFetcher:
    """
    Fetches documents over HTTP(S).

    A custom ``httpx.Client`` may be injected (e.g. with a mock transport);
    otherwise one is created and owned by the fetcher.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    def fetch(self, reference: str) -> Any:
        logger.info("Reading %s", reference)
        try:
            response = self._client.get(reference)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(reference, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(reference, str(exc) or type(exc).__name__) from exc
        return load_yaml(response.text, reference)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpDocumentFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LocalDocumentFetcher:
    """Fetches documents from the local filesystem (plain paths or ``file://``)."""

    def fetch(self, reference: str) -> Any:
        path = Path(reference.removeprefix("file://"))
        logger.info("Reading %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FetchError(reference, exc.strerror or str(exc)) from exc
        return load_yaml(text, reference)


class SchemaDocumentFetcher:
    """
    Dispatches URLs to :class:`HttpDocumentFetcher` and everything else to
    :class:`LocalDocumentFetcher`.
    """

    def __init__(
        self,
        http: HttpDocumentFetcher | None = None,
        local: LocalDocumentFetcher | None = None,
    ) -> None:
        self._http = http or HttpDocumentFetcher()
        self._local = local or LocalDocumentFetcher()

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> SchemaDocumentFetcher:
        """Build a fetcher using the HTTP settings of *config*."""
        return cls(http=HttpDocumentFetcher(timeout=config.timeout, user_agent=config.user_agent))

    def fetch(self, reference: str) -> Any:
        if is_url(reference):
            return self._http.fetch(reference)
        return self._local.fetch(reference)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> SchemaDocumentFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
