"""
singgen - sing-box configuration generator

Turns proxy subscriptions into sing-box configuration documents.
"""

__version__ = "0.1.0"

# Core exports
from singgen.projector import Projector, ProjectionReport, project
from singgen.parser import detect_format, parse_subscription, ParserRegistry, build_default_registry
from singgen.schemas import Node, Outbound, FilterRule, MultiConfig
from singgen.settings import GenerateOptions
from singgen.generator import Generator, generate, generate_from_multi

__all__ = [
    "__version__",
    "Projector",
    "ProjectionReport",
    "project",
    "detect_format",
    "parse_subscription",
    "ParserRegistry",
    "build_default_registry",
    "Node",
    "Outbound",
    "FilterRule",
    "MultiConfig",
    "GenerateOptions",
    "Generator",
    "generate",
    "generate_from_multi",
]
