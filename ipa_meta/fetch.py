"""Retrieval of archive bytes over HTTP."""

import logging
from urllib.parse import quote

import requests

from ipa_meta.config import Config
from ipa_meta.errors import FetchError
from ipa_meta.extractor import extract_meta
from ipa_meta.models import IpaMeta

logger = logging.getLogger(__name__)


def encode_path(path: str) -> str:
    """Percent-encode each /-separated segment of an object key."""
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def fetch_ipa(url: str, timeout: int = 30) -> bytes:
    """
    Download an archive.

    Args:
        url: Absolute http(s) URL
        timeout: Request timeout in seconds

    Returns:
        Response body

    Raises:
        FetchError: On transport errors or a non-2xx status
    """
    logger.info("Fetching %s", url)
    try:
        response = requests.get(url, timeout=timeout, headers={"Cache-Control": "no-cache"})
    except requests.RequestException as e:
        raise FetchError(f"fetch ipa failed: {e}") from e
    if not response.ok:
        raise FetchError(f"fetch ipa failed: HTTP {response.status_code} for {url}")
    logger.info("Fetched %d bytes", len(response.content))
    return response.content


def ensure_ipa_meta(ipa_key: str, config: Config | None = None) -> IpaMeta | None:
    """
    Fetch an archive from object storage by key and extract its metadata.

    Args:
        ipa_key: Object key, relative to config.cdn_base_url; leading slashes are ignored
        config: Settings (defaults when None)

    Returns:
        IpaMeta, or None if the key is empty

    Raises:
        FetchError: If the download fails
        IpaMetaError: If extraction fails (see extract_meta)
    """
    config = config or Config()
    key = ipa_key.strip().lstrip("/").strip()
    if not key:
        return None
    url = config.cdn_base_url + encode_path(key)
    return extract_meta(fetch_ipa(url, timeout=config.fetch_timeout), config)
