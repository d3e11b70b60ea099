import pytest

from singgen.exceptions import NoValidNodesError, PlatformError, SinggenError
from singgen.generator import Generator, process_subscription_nodes
from singgen.projector import SINK_TAG
from singgen.schemas import GlobalConfig, MultiConfig, Node, SubscriptionConfig
from singgen.settings import GenerateOptions

pytestmark = pytest.mark.fast


def outbound_tags(document):
    return [block["tag"] for block in document["outbounds"]]


def assert_references_resolve(document):
    tags = set(outbound_tags(document))
    for block in document["outbounds"]:
        for ref in block.get("outbounds", []):
            assert ref in tags, f"{block['tag']} references missing {ref}"


@pytest.fixture
def options():
    return GenerateOptions(platform="linux", mirror_url="", format="json")


class TestProcessSubscriptionNodes:

    def make_node(self, tag):
        return Node(id="1", tag=tag, type="vmess", addr="a.example.com", port=443)

    def test_prefix_and_emoji(self):
        original = self.make_node("🇭🇰 香港 01")
        [node] = process_subscription_nodes([original], prefix="prov", remove_emoji=True)
        assert node.tag == "prov-香港 01"
        assert original.tag == "🇭🇰 香港 01"

    def test_skip_tls_verify(self):
        [node] = process_subscription_nodes([self.make_node("n")], skip_tls_verify=True)
        assert node.tag == "n"
        assert node.security.skip_verify is True

    def test_emoji_only_tag_is_kept(self):
        [node] = process_subscription_nodes([self.make_node("🇭🇰")], remove_emoji=True)
        assert node.tag == "🇭🇰"


class TestGenerate:

    def test_single_source(self, subscription_file, options):
        document = Generator(options).generate(str(subscription_file))
        tags = outbound_tags(document)

        for leaf in ("🇭🇰 香港 01", "🇯🇵 Japan 01", "US Node", "SG hy2", "TW ss"):
            assert leaf in tags
        assert {"Proxy", "Auto", "HongKong", "Japan", "America", "DirectConn", SINK_TAG} <= set(tags)
        assert "Others" not in tags
        assert tags.index("TW ss") < tags.index("DirectConn")
        assert_references_resolve(document)
        assert document["inbounds"][0]["type"] == "tproxy"

    def test_generate_bytes_yaml(self, subscription_file, options):
        options.format = "yaml"
        data = Generator(options).generate_bytes(str(subscription_file))
        assert b"outbounds:" in data
        assert b"{all}" not in data

    def test_skip_tls_verify_applies_to_nodes(self, subscription_file, options):
        options.skip_tls_verify = True
        document = Generator(options).generate(str(subscription_file))
        vless = next(b for b in document["outbounds"] if b["tag"] == "🇯🇵 Japan 01")
        assert vless["tls"]["insecure"] is True

    def test_garbage_input(self, temp_dir, options):
        path = temp_dir / "garbage.txt"
        path.write_text("nothing to see here\n", encoding="utf-8")
        with pytest.raises(SinggenError):
            Generator(options).generate(str(path))

    def test_unknown_platform(self, subscription_file, options):
        options.platform = "windows"
        with pytest.raises(PlatformError):
            Generator(options).generate(str(subscription_file))


class TestGenerateFromMulti:

    def test_bad_subscription_skipped(self, subscription_file, temp_dir):
        config = MultiConfig(
            global_=GlobalConfig(mirror_url=""),
            subscriptions=[
                SubscriptionConfig(name="good", url=str(subscription_file)),
                SubscriptionConfig(name="missing", url=str(temp_dir / "missing.txt")),
            ],
        )
        document = Generator().generate_from_multi(config)
        tags = outbound_tags(document)
        assert "good-香港 01" in tags
        assert "good-US Node" in tags
        assert not any(tag.startswith("missing-") for tag in tags)
        assert_references_resolve(document)

    def test_overrides_win(self, subscription_file):
        config = MultiConfig(subscriptions=[SubscriptionConfig(name="a", url=str(subscription_file))])
        document = Generator().generate_from_multi(config, {"platform": "darwin", "remove_emoji": False})
        assert document["inbounds"][0]["type"] == "tun"
        assert "a-🇭🇰 香港 01" in outbound_tags(document)

    def test_all_subscriptions_fail(self, temp_dir):
        config = MultiConfig(subscriptions=[SubscriptionConfig(name="x", url=str(temp_dir / "none.txt"))])
        with pytest.raises(NoValidNodesError):
            Generator().generate_from_multi(config)

    def test_bytes_format_from_overrides(self, subscription_file):
        config = MultiConfig(subscriptions=[SubscriptionConfig(name="a", url=str(subscription_file))])
        data = Generator().generate_bytes_from_multi(config, {"format": "yaml"})
        assert data.lstrip().startswith(b"log:")
