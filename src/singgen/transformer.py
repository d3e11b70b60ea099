"""
Node to outbound transformation.

Small batches run sequentially. Larger ones go through a thread pool sized
to min(cpu_count, len(nodes), max_workers); results are put back in input
order and nodes that fail to transform are logged and dropped.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence, Tuple

from singgen.exceptions import UnsupportedProtocolError
from singgen.logging_config import logger
from singgen.projector.config import SINK_TAG
from singgen.schemas import Node, Outbound
from singgen.settings import DEFAULT_MAX_WORKERS

SEQUENTIAL_THRESHOLD = 10


def block_outbound() -> Outbound:
    """The sink egress every template may reference."""
    return Outbound(type="socks", tag=SINK_TAG, server="0.0.0.0", server_port=1080)


def _tls_block(node: Node) -> Dict[str, Any]:
    tls: Dict[str, Any] = {
        "enabled": True,
        "insecure": node.security.skip_verify,
        "server_name": node.security.server_name,
    }
    if node.security.alpn:
        tls["alpn"] = list(node.security.alpn)
    return tls


def _transport_block(node: Node) -> Dict[str, Any]:
    net = node.transport.net
    if not net or net == "tcp":
        return {}

    transport: Dict[str, Any] = {"type": net}
    if node.transport.host:
        transport["host"] = node.transport.host
    if node.transport.path:
        transport["path"] = node.transport.path
    if node.transport.headers:
        transport["headers"] = dict(node.transport.headers)
    return transport


def transform_node(node: Node) -> Outbound:
    """
    Build the outbound for one node.

    Raises:
        UnsupportedProtocolError: If the node type has no outbound mapping.
    """
    outbound = Outbound(type=node.type, tag=node.tag, server=node.addr, server_port=node.port)

    if node.type == "vmess":
        outbound.uuid = node.uuid
        if node.security.tls:
            outbound.tls = _tls_block(node)
        outbound.transport = _transport_block(node)
        alter_id = node.extra.get("alter_id")
        if isinstance(alter_id, int):
            outbound.multiplex = {"enabled": alter_id > 0}

    elif node.type == "vless":
        outbound.uuid = node.uuid
        if node.security.tls:
            outbound.tls = _tls_block(node)
        outbound.transport = _transport_block(node)

    elif node.type == "trojan":
        outbound.password = node.password
        outbound.tls = _tls_block(node)
        outbound.transport = _transport_block(node)

    elif node.type == "hysteria2":
        outbound.password = node.password
        outbound.tls = _tls_block(node)

    elif node.type == "shadowsocks":
        outbound.password = node.password
        method = node.extra.get("method")
        if isinstance(method, str):
            outbound.method = method

    else:
        raise UnsupportedProtocolError(node.type)

    return outbound


class Transformer:
    """Turns parsed nodes into outbounds."""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        self.max_workers = max(1, max_workers)

    def transform(self, nodes: Sequence[Node]) -> List[Outbound]:
        if not nodes:
            return []
        if len(nodes) <= SEQUENTIAL_THRESHOLD:
            return self._transform_sequential(nodes)
        return self._transform_concurrent(nodes)

    def worker_count(self, total: int) -> int:
        return max(1, min(os.cpu_count() or 1, total, self.max_workers))

    def _transform_sequential(self, nodes: Sequence[Node]) -> List[Outbound]:
        outbounds = []
        for node in nodes:
            outbound = self._transform_one(node)
            if outbound is not None:
                outbounds.append(outbound)
        return outbounds

    def _transform_concurrent(self, nodes: Sequence[Node]) -> List[Outbound]:
        workers = self.worker_count(len(nodes))
        logger.debug(f"Transforming {len(nodes)} nodes with {workers} workers")

        results: List[Tuple[int, Optional[Outbound]]] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._transform_one, node): idx
                for idx, node in enumerate(nodes)
            }
            for future in as_completed(futures):
                results.append((futures[future], future.result()))

        # Restore input order
        results.sort(key=lambda item: item[0])
        return [outbound for _, outbound in results if outbound is not None]

    def _transform_one(self, node: Node) -> Optional[Outbound]:
        try:
            return transform_node(node)
        except (UnsupportedProtocolError, ValueError) as e:
            logger.warning(f"Failed to transform node '{node.tag}': {e}")
            return None
