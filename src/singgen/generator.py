"""
Generation pipeline.

Single source: fetch -> validate/detect -> parse -> transform -> inject.
Multi-subscription: each subscription is fetched, parsed, tagged with its
name and transformed on its own; failures are logged and skipped. The merged
outbounds are then projected into the template once.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from singgen.emoji import clean_tag
from singgen.exceptions import NoValidNodesError, SinggenError
from singgen.fetcher import get_fetcher
from singgen.logging_config import logger
from singgen.parser import ParserRegistry, build_default_registry, parse_subscription
from singgen.platforms import AdapterFactory
from singgen.projector import Projector
from singgen.renderer import render
from singgen.schemas import MultiConfig, Node, Outbound
from singgen.settings import GenerateOptions, merge_subscription_options
from singgen.template import Template
from singgen.tracing import trace
from singgen.transformer import Transformer


def process_subscription_nodes(
    nodes: Sequence[Node],
    prefix: str = "",
    remove_emoji: bool = False,
    skip_tls_verify: bool = False,
) -> List[Node]:
    """
    Copy `nodes` with `<prefix>-` prepended to each tag, emoji optionally
    stripped first, and certificate checks optionally disabled.
    """
    processed = []
    for node in nodes:
        node = node.model_copy(deep=True)
        tag = clean_tag(node.tag, remove_emoji) or node.tag
        node.tag = f"{prefix}-{tag}" if prefix else tag
        if skip_tls_verify:
            node.security.skip_verify = True
        processed.append(node)
    return processed


class Generator:
    """
    Runs the pipeline with one set of options. Collaborators can be passed
    in; otherwise defaults are built from the options.
    """

    def __init__(
        self,
        options: Optional[GenerateOptions] = None,
        registry: Optional[ParserRegistry] = None,
        transformer: Optional[Transformer] = None,
        projector: Optional[Projector] = None,
        adapter_factory: Optional[AdapterFactory] = None,
    ):
        self.options = options or GenerateOptions()
        self.registry = registry or build_default_registry()
        self.transformer = transformer or Transformer(max_workers=self.options.max_workers)
        self.projector = projector or Projector()
        self.adapter_factory = adapter_factory or AdapterFactory()

    def fetch(self, source: str, options: Optional[GenerateOptions] = None) -> bytes:
        options = options or self.options
        fetcher = get_fetcher(source, timeout=options.http_timeout, skip_tls_verify=options.skip_tls_verify)
        return fetcher.fetch(source)

    def parse_nodes(self, source: str, options: Optional[GenerateOptions] = None) -> List[Node]:
        data = self.fetch(source, options)
        nodes = parse_subscription(data, self.registry)
        if not nodes:
            raise NoValidNodesError()
        return nodes

    def transform(self, nodes: Sequence[Node]) -> List[Outbound]:
        outbounds = self.transformer.transform(nodes)
        if not outbounds:
            raise NoValidNodesError("No nodes could be converted to outbounds")
        return outbounds

    def build(self, outbounds: Sequence[Outbound], options: Optional[GenerateOptions] = None) -> Dict[str, Any]:
        options = options or self.options
        template = Template.from_version(options.template_version)
        return template.inject(outbounds, options, self.projector, self.adapter_factory)

    @trace
    def generate(self, source: str) -> Dict[str, Any]:
        """
        Generate a document from one subscription URL or file.

        Raises:
            FetchError, ParseError, UnsupportedProtocolError, NoValidNodesError,
            TemplateError, PlatformError
        """
        nodes = self.parse_nodes(source)
        if self.options.skip_tls_verify:
            nodes = process_subscription_nodes(nodes, skip_tls_verify=True)
        outbounds = self.transform(nodes)
        logger.info(f"Transformed {len(nodes)} nodes into {len(outbounds)} outbounds")
        return self.build(outbounds)

    def generate_bytes(self, source: str) -> bytes:
        return render(self.generate(source), self.options.format)

    @trace
    def generate_from_multi(self, config: MultiConfig, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generate one document from every subscription in `config`.

        `overrides` replaces fields of the merged per-subscription options
        (for example a platform chosen on the command line).

        Raises:
            ConfigError: If the configuration is invalid.
            NoValidNodesError: If no subscription produced an outbound.
        """
        config.validate_config()
        overrides = overrides or {}
        logger.info(f"Starting multi-subscription generation ({len(config.subscriptions)} subscriptions)")

        merged: List[Outbound] = []
        for index, sub in enumerate(config.subscriptions, start=1):
            options = replace(merge_subscription_options(config, sub), **overrides)
            logger.info(f"Processing subscription {index}/{len(config.subscriptions)}: {sub.name}")
            try:
                nodes = self.parse_nodes(sub.url, options)
                nodes = process_subscription_nodes(
                    nodes,
                    prefix=sub.name,
                    remove_emoji=options.remove_emoji,
                    skip_tls_verify=options.skip_tls_verify,
                )
                outbounds = self.transform(nodes)
            except SinggenError as e:
                logger.error(f"Skipping subscription '{sub.name}': {e}")
                continue

            logger.info(f"Subscription '{sub.name}': {len(nodes)} nodes, {len(outbounds)} outbounds")
            merged.extend(outbounds)

        if not merged:
            raise NoValidNodesError("No valid nodes found in any subscription")

        logger.info(f"Merged {len(merged)} outbounds from all subscriptions")
        template_options = replace(merge_subscription_options(config, config.subscriptions[0]), **overrides)
        return self.build(merged, template_options)

    def generate_bytes_from_multi(self, config: MultiConfig, overrides: Optional[Dict[str, Any]] = None) -> bytes:
        document = self.generate_from_multi(config, overrides)
        fmt = (overrides or {}).get("format") or config.global_.format
        return render(document, fmt)


def generate(source: str, options: Optional[GenerateOptions] = None) -> Dict[str, Any]:
    return Generator(options).generate(source)


def generate_from_multi(config: MultiConfig, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return Generator().generate_from_multi(config, overrides)
