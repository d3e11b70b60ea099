"""
Serialization of the generated document.
"""

import json
from typing import Any, Dict, List

import yaml

from singgen.exceptions import RenderError

FORMATS = ("json", "yaml")


class JSONRenderer:
    def render(self, document: Any) -> bytes:
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise RenderError(f"Failed to render JSON: {e}") from e
        return (text + "\n").encode("utf-8")


class YAMLRenderer:
    def render(self, document: Any) -> bytes:
        try:
            text = yaml.safe_dump(document, allow_unicode=True, sort_keys=False, default_flow_style=False)
        except yaml.YAMLError as e:
            raise RenderError(f"Failed to render YAML: {e}") from e
        return text.encode("utf-8")


_RENDERERS: Dict[str, type] = {
    "json": JSONRenderer,
    "yaml": YAMLRenderer,
    "yml": YAMLRenderer,
}


def get_renderer(fmt: str):
    """
    Raises:
        RenderError: If `fmt` is not a known output format.
    """
    renderer_cls = _RENDERERS.get(fmt.lower())
    if renderer_cls is None:
        raise RenderError(f"Unsupported output format: {fmt}. Valid formats: {', '.join(FORMATS)}")
    return renderer_cls()


def render(document: Any, fmt: str = "json") -> bytes:
    return get_renderer(fmt).render(document)


def list_formats() -> List[str]:
    return list(FORMATS)
