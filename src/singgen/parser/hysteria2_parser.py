from singgen.schemas import Node, Security
from .base import LineParser, fallback_tag, query_params, split_url, userinfo
from .utils import fragment_tag, md5_string, split_csv

DEFAULT_ALPN = ["h3"]


class Hysteria2Parser(LineParser):
    """
    hysteria2://<password>@<host>:<port>?<params>#<tag> (also hy2://).

    ALPN defaults to h3. `obfs` and `obfs-password` become an obfs block.
    """

    protocol = "hysteria2"
    prefixes = ("hysteria2://", "hy2://")

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
                skip_verify=query.get("insecure") == "1",
                server_name=query.get("sni", ""),
                alpn=split_csv(query.get("alpn", "")) or list(DEFAULT_ALPN),
            ),
        )

        if query.get("obfs"):
            node.extra["obfs"] = {
                "type": query["obfs"],
                "password": query.get("obfs-password", ""),
            }

        return node
