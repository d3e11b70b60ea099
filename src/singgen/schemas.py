from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from singgen.exceptions import ConfigError


class Security(BaseModel):
    """
    TLS settings carried by a parsed node.
    """
    tls: bool = False
    skip_verify: bool = False
    server_name: str = ""
    alpn: List[str] = Field(default_factory=list)


class Transport(BaseModel):
    """
    Stream transport settings (ws, grpc, h2, ...) carried by a parsed node.
    """
    net: str = ""
    host: str = ""
    path: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)


class Node(BaseModel):
    """
    Protocol-neutral record produced by a subscription parser.
    """
    id: str
    tag: str
    type: str
    addr: str
    port: int
    uuid: str = ""
    password: str = ""
    security: Security = Field(default_factory=Security)
    transport: Transport = Field(default_factory=Transport)
    extra: Dict[str, Any] = Field(default_factory=dict)


class Outbound(BaseModel):
    """
    A leaf egress ready to be injected into the target document.
    Acts as a candidate node for placeholder expansion.
    """
    type: str
    tag: str
    server: str = ""
    server_port: int = 0
    uuid: str = ""
    password: str = ""
    method: str = ""
    transport: Dict[str, Any] = Field(default_factory=dict)
    tls: Dict[str, Any] = Field(default_factory=dict)
    multiplex: Dict[str, Any] = Field(default_factory=dict)

    def to_block(self) -> Dict[str, Any]:
        """Render as a document block, dropping empty optional fields."""
        block: Dict[str, Any] = {
            "type": self.type,
            "tag": self.tag,
            "server": self.server,
            "server_port": self.server_port,
        }
        for key in ("uuid", "password", "method", "transport", "tls", "multiplex"):
            value = getattr(self, key)
            if value:
                block[key] = value
        return block


class FilterRule(BaseModel):
    """
    One include/exclude step applied to the candidate list.
    """
    action: Literal["include", "exclude"]
    keywords: List[str]


class SubscriptionConfig(BaseModel):
    """
    One subscription source; unset fields fall back to the global section.
    """
    url: str = ""
    name: str = ""
    remove_emoji: Optional[bool] = None
    skip_tls_verify: Optional[bool] = None
    http_timeout: Optional[float] = None


class GlobalConfig(BaseModel):
    """
    Global defaults for a multi-subscription run.
    """
    template: str = "v1.12"
    platform: str = "linux"
    mirror_url: str = "https://ghfast.top"
    dns_server: str = "114.114.114.114"
    webui_address: str = "127.0.0.1:9095"
    remove_emoji: bool = True
    skip_tls_verify: bool = False
    http_timeout: float = 30.0
    format: str = "json"
    client_subnet: str = ""


class MultiConfig(BaseModel):
    """
    Configuration file contents: global defaults plus a list of subscriptions.
    """
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    subscriptions: List[SubscriptionConfig] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def validate_config(self) -> None:
        """
        Check the subscription list.

        Raises:
            ConfigError: If there are no subscriptions, a name or URL is empty,
                or two subscriptions share a name.
        """
        if not self.subscriptions:
            raise ConfigError("No subscriptions configured")

        seen = set()
        for sub in self.subscriptions:
            if not sub.name:
                raise ConfigError("Subscription name cannot be empty")
            if not sub.url:
                raise ConfigError(f"Subscription URL cannot be empty (subscription '{sub.name}')")
            if sub.name in seen:
                raise ConfigError(f"Duplicate subscription name: {sub.name}")
            seen.add(sub.name)
