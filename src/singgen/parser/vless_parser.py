from singgen.schemas import Node, Security, Transport
from .base import LineParser, fallback_tag, query_params, split_url, userinfo
from .utils import fragment_tag, md5_string, split_csv


class VlessParser(LineParser):
    """vless://<uuid>@<host>:<port>?<params>#<tag>"""

    protocol = "vless"
    prefixes = ("vless://",)

    def parse_line(self, line: str) -> Node:
        parts, port = split_url(line)
        query = query_params(parts)
        host = parts.hostname

        node = Node(
            id=md5_string(line),
            tag=fragment_tag(parts.fragment) or fallback_tag(self.protocol, host, port),
            type=self.protocol,
            addr=host,
            port=port,
            uuid=userinfo(parts),
            security=Security(
                tls=query.get("security") == "tls",
                skip_verify=query.get("allowInsecure") == "1",
                server_name=query.get("sni", ""),
                alpn=split_csv(query.get("alpn", "")),
            ),
            transport=Transport(
                net=query.get("type", ""),
                host=query.get("host", ""),
                path=query.get("path", ""),
            ),
        )

        for key in ("encryption", "flow"):
            if query.get(key):
                node.extra[key] = query[key]

        return node
