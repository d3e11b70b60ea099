import json
from typing import Any, Dict

from singgen.schemas import Node, Security, Transport
from .base import LineParser, fallback_tag
from .utils import decode_base64, md5_string, split_csv


def _to_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid {field} type: bool")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"invalid {field} type: {type(value).__name__}")


class VmessParser(LineParser):
    """
    vmess://<base64 JSON>

    The JSON payload uses the v2rayN share format: add, port, id, aid, net,
    host, path, tls, ps, scy, sni, alpn.
    """

    protocol = "vmess"
    prefixes = ("vmess://",)

    def parse_line(self, line: str) -> Node:
        payload = line[len("vmess://"):]
        try:
            dto: Dict[str, Any] = json.loads(decode_base64(payload).decode("utf-8"))
        except UnicodeDecodeError as e:
            raise ValueError(f"payload is not UTF-8: {e}") from e
        if not isinstance(dto, dict):
            raise ValueError("payload is not a JSON object")

        addr = str(dto.get("add", "")).strip()
        if not addr:
            raise ValueError("missing address")
        port = _to_int(dto.get("port"), "port")
        if not 0 < port < 65536:
            raise ValueError(f"port out of range: {port}")

        node = Node(
            id=md5_string(line),
            tag=str(dto.get("ps") or "").strip() or fallback_tag(self.protocol, addr, port),
            type=self.protocol,
            addr=addr,
            port=port,
            uuid=str(dto.get("id", "")),
            security=Security(
                tls=dto.get("tls") == "tls",
                skip_verify=True,
                server_name=str(dto.get("sni") or ""),
                alpn=split_csv(str(dto.get("alpn") or "")),
            ),
            transport=Transport(
                net=str(dto.get("net") or ""),
                host=str(dto.get("host") or ""),
                path=str(dto.get("path") or ""),
            ),
        )

        if dto.get("scy"):
            node.extra["security"] = dto["scy"]
        try:
            node.extra["alter_id"] = _to_int(dto.get("aid", 0), "aid")
        except ValueError:
            pass

        return node
