"""
Platform adapters.

Each adapter replaces the template's inbounds with the platform's own and
patches the route and experimental sections. Adapters are created through
AdapterFactory.
"""

from typing import Any, Dict, List

from singgen.exceptions import PlatformError
from singgen.logging_config import logger

DEFAULT_CONTROLLER = "127.0.0.1:9095"
LINUX_CACHE_PATH = "/etc/sing-box/cache.db"


def _section(document: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = document.get(key)
    if not isinstance(value, dict):
        value = {}
        document[key] = value
    return value


def _set_clash_api(experimental: Dict[str, Any], controller: str) -> None:
    clash_api = experimental.get("clash_api")
    if not isinstance(clash_api, dict):
        clash_api = {}
        experimental["clash_api"] = clash_api
    clash_api["external_controller"] = controller
    clash_api.setdefault("default_mode", "rule")
    clash_api.setdefault("secret", "")


class PlatformAdapter:
    name: str = ""

    def inbounds(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def adapt(self, document: Dict[str, Any], external_controller: str = "") -> Dict[str, Any]:
        document["inbounds"] = self.inbounds()
        self.patch(document, external_controller)
        return document

    def patch(self, document: Dict[str, Any], external_controller: str) -> None:
        raise NotImplementedError


class LinuxAdapter(PlatformAdapter):
    """Transparent proxy (tproxy) on a Linux router or host."""

    name = "linux"

    def inbounds(self) -> List[Dict[str, Any]]:
        return [
            {
                "type": "tproxy",
                "tag": "tproxy-in",
                "listen": "::",
                "listen_port": 7895,
                "udp_timeout": "5m",
            }
        ]

    def patch(self, document: Dict[str, Any], external_controller: str) -> None:
        route = _section(document, "route")
        if route.get("auto_detect_interface") is True:
            route["default_mark"] = 1

        experimental = _section(document, "experimental")
        if external_controller:
            _set_clash_api(experimental, external_controller)

        cache_file = experimental.get("cache_file")
        if isinstance(cache_file, dict):
            cache_file["path"] = LINUX_CACHE_PATH


class TunAdapter(PlatformAdapter):
    """
    TUN inbound for desktop and mobile clients. The controller address is
    fixed and the cache file stays in the client's default location.
    """

    def inbounds(self) -> List[Dict[str, Any]]:
        return [
            {
                "type": "tun",
                "tag": "tun-in",
                "address": ["10.8.8.8/30"],
                "mtu": 9000,
                "auto_route": True,
                "stack": "system",
                "route_exclude_address_set": [
                    "geosite-private",
                    "geosite-ctm_cn",
                    "geoip-cn",
                ],
            }
        ]

    def patch(self, document: Dict[str, Any], external_controller: str) -> None:
        route = document.get("route")
        if isinstance(route, dict):
            route.pop("default_mark", None)

        experimental = _section(document, "experimental")
        _set_clash_api(experimental, DEFAULT_CONTROLLER)

        cache_file = experimental.get("cache_file")
        if isinstance(cache_file, dict):
            cache_file.pop("path", None)


class DarwinAdapter(TunAdapter):
    name = "darwin"


class IOSAdapter(TunAdapter):
    name = "ios"


class AdapterFactory:
    """Creates platform adapters by name."""

    def __init__(self):
        self._adapters = {
            LinuxAdapter.name: LinuxAdapter,
            DarwinAdapter.name: DarwinAdapter,
            IOSAdapter.name: IOSAdapter,
        }

    def platforms(self) -> List[str]:
        return list(self._adapters)

    def create(self, platform: str) -> PlatformAdapter:
        """
        Raises:
            PlatformError: If `platform` has no adapter.
        """
        adapter_cls = self._adapters.get((platform or LinuxAdapter.name).lower())
        if adapter_cls is None:
            raise PlatformError(platform, self.platforms())
        logger.debug(f"Using platform adapter: {adapter_cls.name}")
        return adapter_cls()
