from singgen.schemas import Node, Security, Transport
from .base import LineParser, fallback_tag, query_params, split_url, userinfo
from .utils import fragment_tag, md5_string, split_csv


class TrojanParser(LineParser):
    """trojan://<password>@<host>:<port>?<params>#<tag>; TLS is always on."""

    protocol = "trojan"
    prefixes = ("trojan://",)

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
            password=userinfo(parts),
            security=Security(
                tls=True,
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

        if query.get("security"):
            node.extra["security"] = query["security"]

        return node
