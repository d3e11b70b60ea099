"""
Generation Options.

Runtime options for a generation run. Every default can be overridden
through a SINGGEN_* environment variable.

Environment Variables:
    SINGGEN_TEMPLATE: Template version (default: v1.12)
    SINGGEN_PLATFORM: Target platform (default: linux)
    SINGGEN_HTTP_TIMEOUT: Fetch timeout in seconds (default: 10)
    SINGGEN_MIRROR_URL: Rule-set mirror prefix (default: empty)
    SINGGEN_DNS_SERVER: Local DNS server (default: 114.114.114.114)
    SINGGEN_EXTERNAL_CONTROLLER: Clash API address (default: 127.0.0.1:9095)
    SINGGEN_FORMAT: Output format, json or yaml (default: json)
    SINGGEN_REMOVE_EMOJI: Strip emoji from node tags (default: false)
    SINGGEN_MAX_WORKERS: Transform worker cap (default: 8)
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict

from singgen.schemas import MultiConfig, SubscriptionConfig


DEFAULT_TEMPLATE_VERSION = "v1.12"
DEFAULT_PLATFORM = "linux"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_DNS_SERVER = "114.114.114.114"
DEFAULT_EXTERNAL_CONTROLLER = "127.0.0.1:9095"
DEFAULT_FORMAT = "json"
DEFAULT_MAX_WORKERS = 8


def _env_str(key: str, default: str) -> str:
    """Read string from environment variable."""
    value = os.getenv(key)
    return default if value is None else value


def _env_int(key: str, default: int) -> int:
    """Read integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    """Read float from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    """Read boolean from environment variable."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


@dataclass
class GenerateOptions:
    """
    Options for a single generation run.
    """

    template_version: str = field(default_factory=lambda: _env_str(
        "SINGGEN_TEMPLATE", DEFAULT_TEMPLATE_VERSION
    ))
    platform: str = field(default_factory=lambda: _env_str(
        "SINGGEN_PLATFORM", DEFAULT_PLATFORM
    ))
    http_timeout: float = field(default_factory=lambda: _env_float(
        "SINGGEN_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT
    ))
    mirror_url: str = field(default_factory=lambda: _env_str(
        "SINGGEN_MIRROR_URL", ""
    ))
    dns_server: str = field(default_factory=lambda: _env_str(
        "SINGGEN_DNS_SERVER", DEFAULT_DNS_SERVER
    ))
    external_controller: str = field(default_factory=lambda: _env_str(
        "SINGGEN_EXTERNAL_CONTROLLER", DEFAULT_EXTERNAL_CONTROLLER
    ))
    client_subnet: str = ""
    format: str = field(default_factory=lambda: _env_str(
        "SINGGEN_FORMAT", DEFAULT_FORMAT
    ))
    remove_emoji: bool = field(default_factory=lambda: _env_bool(
        "SINGGEN_REMOVE_EMOJI", False
    ))
    skip_tls_verify: bool = False
    max_workers: int = field(default_factory=lambda: _env_int(
        "SINGGEN_MAX_WORKERS", DEFAULT_MAX_WORKERS
    ))

    def to_dict(self) -> Dict[str, Any]:
        """Export options as dictionary (for JSON output)."""
        return {
            "template_version": self.template_version,
            "platform": self.platform,
            "http_timeout": self.http_timeout,
            "mirror_url": self.mirror_url,
            "dns_server": self.dns_server,
            "external_controller": self.external_controller,
            "client_subnet": self.client_subnet,
            "format": self.format,
            "remove_emoji": self.remove_emoji,
            "skip_tls_verify": self.skip_tls_verify,
            "max_workers": self.max_workers,
        }


def merge_subscription_options(config: MultiConfig, sub: SubscriptionConfig) -> GenerateOptions:
    """
    Build options for one subscription: global section first, then the
    subscription's own overrides.
    """
    g = config.global_
    options = GenerateOptions(
        template_version=g.template,
        platform=g.platform,
        http_timeout=g.http_timeout,
        mirror_url=g.mirror_url,
        dns_server=g.dns_server,
        external_controller=g.webui_address,
        client_subnet=g.client_subnet,
        format=g.format,
        remove_emoji=g.remove_emoji,
        skip_tls_verify=g.skip_tls_verify,
    )

    overrides = {}
    if sub.remove_emoji is not None:
        overrides["remove_emoji"] = sub.remove_emoji
    if sub.skip_tls_verify is not None:
        overrides["skip_tls_verify"] = sub.skip_tls_verify
    if sub.http_timeout is not None:
        overrides["http_timeout"] = sub.http_timeout

    return replace(options, **overrides) if overrides else options
