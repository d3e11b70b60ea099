# Custom exceptions for singgen

class SinggenError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ConfigError(SinggenError):
    """Raised for configuration-related problems."""
    pass


class FetchError(SinggenError):
    """Raised when a subscription source cannot be retrieved."""
    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"Failed to fetch {source}: {message}")


class ParseError(SinggenError):
    """Raised when subscription data yields no usable nodes."""
    pass


class UnsupportedProtocolError(SinggenError):
    """Raised when no registered parser recognizes the data or a node type."""
    def __init__(self, protocol: str):
        self.protocol = protocol
        super().__init__(f"Unsupported protocol: {protocol}")


class NoValidNodesError(SinggenError):
    """Raised when a run produces zero usable nodes."""
    def __init__(self, message: str = "No valid nodes found in source"):
        super().__init__(message)


class TemplateError(SinggenError):
    """Raised when a template cannot be located or decoded."""
    pass


class RenderError(SinggenError):
    """Raised when the output document cannot be serialized."""
    pass


class PlatformError(SinggenError):
    """Raised for an unknown target platform."""
    def __init__(self, platform: str, valid: list = None):
        self.platform = platform
        self.valid = valid or []
        message = f"Unsupported platform: {platform}"
        if self.valid:
            message += f". Valid platforms: {', '.join(self.valid)}"
        super().__init__(message)
