"""
Subscription source retrieval over HTTP(S) or from the local filesystem.
"""

import ipaddress
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlsplit

import requests

from singgen.exceptions import FetchError
from singgen.logging_config import logger
from singgen.settings import DEFAULT_HTTP_TIMEOUT

MAX_RESPONSE_SIZE = 10 * 1024 * 1024

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/plain,text/html,application/json,*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "identity",
    "Cache-Control": "no-cache",
}


def _is_private_host(hostname: str) -> bool:
    if hostname == "localhost":
        return True
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return address.is_private or address.is_loopback


class HTTPFetcher:
    """
    GET a subscription over HTTP(S).

    Only http and https URLs with a host are accepted. Private and loopback
    hosts are allowed but logged. The body is capped at 10 MiB.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        skip_tls_verify: bool = False,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.timeout = timeout
        self.skip_tls_verify = skip_tls_verify
        self.session = session or requests.Session()
        self.headers = dict(DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)

    def validate_url(self, url: str) -> None:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme not in ("http", "https"):
            raise FetchError(url, f"unsupported scheme '{scheme}', only http and https are allowed")
        if not parts.hostname:
            raise FetchError(url, "missing host in URL")
        if _is_private_host(parts.hostname.lower()):
            logger.warning(f"Accessing local/private network address: {url}")

    def fetch(self, url: str) -> bytes:
        """
        Raises:
            FetchError: On an invalid URL, a transport failure, a non-200
                status, or an oversized body.
        """
        self.validate_url(url)

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                timeout=self.timeout,
                verify=not self.skip_tls_verify,
                stream=True,
            )
        except requests.RequestException as e:
            raise FetchError(url, f"HTTP request failed: {e}") from e

        try:
            if response.status_code != 200:
                raise FetchError(url, f"HTTP status {response.status_code}")

            body = bytearray()
            for chunk in response.iter_content(chunk_size=65536):
                body.extend(chunk)
                if len(body) > MAX_RESPONSE_SIZE:
                    raise FetchError(url, f"response larger than {MAX_RESPONSE_SIZE} bytes")
        except requests.RequestException as e:
            raise FetchError(url, f"reading response failed: {e}") from e
        finally:
            response.close()

        logger.info(f"HTTP fetch successful: {url} ({len(body)} bytes)")
        return bytes(body)


class FileFetcher:
    """Read a subscription from a local path or a file:// URL."""

    def fetch(self, source: str) -> bytes:
        path = Path(unquote(urlsplit(source).path)) if source.startswith("file://") else Path(source)

        if not path.is_file():
            raise FetchError(source, f"file does not exist: {path}")

        try:
            data = path.read_bytes()
        except OSError as e:
            raise FetchError(source, f"read file failed: {e}") from e

        logger.info(f"File fetch successful: {path} ({len(data)} bytes)")
        return data


def is_url(source: str) -> bool:
    return urlsplit(source).scheme.lower() in ("http", "https")


def get_fetcher(source: str, timeout: float = DEFAULT_HTTP_TIMEOUT, skip_tls_verify: bool = False):
    """Pick the fetcher for `source`: HTTP for http(s) URLs, file otherwise."""
    if is_url(source):
        return HTTPFetcher(timeout=timeout, skip_tls_verify=skip_tls_verify)
    return FileFetcher()
