from urllib.parse import unquote

from singgen.schemas import Node
from .base import LineParser, fallback_tag, query_params, split_url, userinfo
from .utils import decode_base64_text, fragment_tag, md5_string


class ShadowsocksParser(LineParser):
    """
    ss://<userinfo>@<host>:<port>?plugin=...#<tag>

    The userinfo is either base64 of `method:password` or a plain
    `method:password` pair.
    """

    protocol = "shadowsocks"
    prefixes = ("ss://",)

    def parse_line(self, line: str) -> Node:
        parts, port = split_url(line)
        host = parts.hostname

        method, password = "", ""
        user = userinfo(parts)
        if parts.password is not None:
            method, password = user, unquote(parts.password)
        elif user:
            decoded = decode_base64_text(user)
            if decoded is None:
                method = user
            elif ":" in decoded:
                method, password = decoded.split(":", 1)

        node = Node(
            id=md5_string(line),
            tag=fragment_tag(parts.fragment) or fallback_tag(self.protocol, host, port),
            type=self.protocol,
            addr=host,
            port=port,
            password=password,
        )

        if method:
            node.extra["method"] = method

        query = query_params(parts)
        if query.get("plugin"):
            node.extra["plugin"] = query["plugin"]
            if query.get("plugin-opts"):
                node.extra["plugin_opts"] = query["plugin-opts"]

        return node
