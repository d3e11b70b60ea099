"""
Template loading and injection.

Templates are YAML documents shipped in `singgen/templates/` and named
`template-<version>.yaml`.
"""

import copy
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import yaml

from singgen.emoji import clean_tag
from singgen.exceptions import TemplateError
from singgen.logging_config import logger
from singgen.platforms import AdapterFactory
from singgen.projector import Projector
from singgen.projector.config import OUTBOUNDS_KEY
from singgen.schemas import Outbound
from singgen.settings import DEFAULT_TEMPLATE_VERSION, GenerateOptions

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_PREFIX = "template-"
TEMPLATE_SUFFIX = ".yaml"

MIRROR_PLACEHOLDER = "{mirror_url}"
# Values in the shipped templates that options replace
TEMPLATE_CLIENT_SUBNET = "223.5.5.5/32"
TEMPLATE_DNS_SERVER = "114.114.114.114"
LOCAL_DNS_TAG = "dns_local"
DIRECT_TAG = "DirectConn"


def list_template_versions(template_dir: Path = TEMPLATE_DIR) -> List[str]:
    """Versions of the templates in `template_dir`, sorted."""
    if not template_dir.is_dir():
        return []
    return sorted(
        path.name[len(TEMPLATE_PREFIX):-len(TEMPLATE_SUFFIX)]
        for path in template_dir.glob(f"{TEMPLATE_PREFIX}*{TEMPLATE_SUFFIX}")
    )


def walk_replace(obj: Any, replacer: Callable[[str], str]) -> None:
    """Apply `replacer` to every string value in maps and lists, in place."""
    if isinstance(obj, dict):
        for key, value in obj.items():
            if isinstance(value, str):
                obj[key] = replacer(value)
            elif isinstance(value, (dict, list)):
                walk_replace(value, replacer)
    elif isinstance(obj, list):
        for i, item in enumerate(obj):
            if isinstance(item, str):
                obj[i] = replacer(item)
            elif isinstance(item, (dict, list)):
                walk_replace(item, replacer)


def replace_mirror_url(document: Dict[str, Any], mirror_url: str) -> None:
    """Fill in `{mirror_url}`; with no mirror the placeholder and its slash are dropped."""
    mirror_url = mirror_url.rstrip("/")
    if mirror_url:
        walk_replace(document, lambda s: s.replace(MIRROR_PLACEHOLDER, mirror_url))
    else:
        walk_replace(document, lambda s: s.replace(MIRROR_PLACEHOLDER + "/", ""))


def inject_external_controller(document: Dict[str, Any], controller: str) -> None:
    experimental = document.setdefault("experimental", {})
    clash_api = experimental.setdefault("clash_api", {})
    clash_api["external_controller"] = controller


def inject_client_subnet(document: Dict[str, Any], subnet: str) -> None:
    walk_replace(document, lambda s: subnet if s == TEMPLATE_CLIENT_SUBNET else s)
    dns = document.get("dns")
    if isinstance(dns, dict):
        dns["client_subnet"] = subnet


def inject_dns_server(document: Dict[str, Any], server: str) -> None:
    walk_replace(document, lambda s: server if s == TEMPLATE_DNS_SERVER else s)
    dns = document.get("dns")
    if not isinstance(dns, dict) or not isinstance(dns.get("servers"), list):
        return
    for entry in dns["servers"]:
        if isinstance(entry, dict) and entry.get("tag") == LOCAL_DNS_TAG:
            entry["server"] = server
            break


def insert_outbounds(document: Dict[str, Any], blocks: Sequence[Dict[str, Any]]) -> None:
    """Insert proxy blocks before the DirectConn outbound, or append them."""
    existing = document.get(OUTBOUNDS_KEY)
    if not isinstance(existing, list):
        existing = []
        document[OUTBOUNDS_KEY] = existing

    position = len(existing)
    for i, block in enumerate(existing):
        if isinstance(block, dict) and block.get("tag") == DIRECT_TAG:
            position = i
            break

    existing[position:position] = list(blocks)


class Template:
    """
    A decoded template document. `inject` never mutates it; every call
    works on a deep copy.
    """

    def __init__(self, data: Dict[str, Any], version: str = ""):
        if not isinstance(data, dict):
            raise TemplateError(f"Template {version or '<inline>'} is not a mapping")
        self.data = data
        self.version = version

    @classmethod
    def from_file(cls, path: Path, version: str = "") -> "Template":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise TemplateError(f"Template file not found: {path}")
        except yaml.YAMLError as e:
            raise TemplateError(f"Invalid YAML in template {path}: {e}")
        return cls(data, version or path.stem)

    @classmethod
    def from_version(cls, version: str = DEFAULT_TEMPLATE_VERSION, template_dir: Path = TEMPLATE_DIR) -> "Template":
        """
        Raises:
            TemplateError: If no template exists for `version`.
        """
        version = version or DEFAULT_TEMPLATE_VERSION
        path = template_dir / f"{TEMPLATE_PREFIX}{version}{TEMPLATE_SUFFIX}"
        if not path.is_file():
            available = ", ".join(list_template_versions(template_dir)) or "none"
            raise TemplateError(f"Template version '{version}' not found. Available: {available}")
        return cls.from_file(path, version)

    def inject(
        self,
        outbounds: Sequence[Outbound],
        options: Optional[GenerateOptions] = None,
        projector: Optional[Projector] = None,
        adapter_factory: Optional[AdapterFactory] = None,
    ) -> Dict[str, Any]:
        """
        Build the final document for `outbounds`.

        Order: option substitutions, projection of the outbounds into the
        groups, insertion of the proxy blocks, then the platform adapter.

        Raises:
            PlatformError: If `options.platform` has no adapter.
        """
        options = options or GenerateOptions()
        projector = projector or Projector()
        adapter_factory = adapter_factory or AdapterFactory()
        adapter = adapter_factory.create(options.platform)

        document = copy.deepcopy(self.data)

        if options.remove_emoji:
            outbounds = [
                outbound.model_copy(update={"tag": clean_tag(outbound.tag, True) or outbound.tag})
                for outbound in outbounds
            ]

        replace_mirror_url(document, options.mirror_url)
        if options.external_controller:
            inject_external_controller(document, options.external_controller)
        if options.client_subnet:
            inject_client_subnet(document, options.client_subnet)
        if options.dns_server:
            inject_dns_server(document, options.dns_server)

        report = projector.project(document, outbounds)
        logger.info(
            f"Projected {len(outbounds)} nodes into template {self.version}: "
            f"removed {report.removed_blocks} groups and {report.removed_references} references"
        )

        insert_outbounds(document, [outbound.to_block() for outbound in outbounds])

        return adapter.adapt(document, options.external_controller)
