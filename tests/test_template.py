import pytest

from singgen.exceptions import PlatformError, TemplateError
from singgen.schemas import Outbound
from singgen.settings import GenerateOptions
from singgen.template import (
    Template,
    insert_outbounds,
    list_template_versions,
    replace_mirror_url,
)

pytestmark = pytest.mark.fast


def make_outbounds(*tags):
    return [Outbound(type="trojan", tag=tag, server="s.example.com", server_port=443, password="pw") for tag in tags]


def options(**kwargs):
    defaults = dict(
        template_version="v1.12",
        platform="linux",
        mirror_url="",
        dns_server="114.114.114.114",
        external_controller="127.0.0.1:9095",
        client_subnet="",
        remove_emoji=False,
    )
    defaults.update(kwargs)
    return GenerateOptions(**defaults)


def outbound_tags(document):
    return [block["tag"] for block in document["outbounds"]]


def find(document, tag):
    return next(block for block in document["outbounds"] if block["tag"] == tag)


class TestTemplateLoading:

    def test_packaged_versions(self):
        assert "v1.12" in list_template_versions()

    def test_unknown_version(self):
        with pytest.raises(TemplateError, match="not found"):
            Template.from_version("v0.0")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "template-bad.yaml"
        path.write_text("outbounds: [unclosed", encoding="utf-8")
        with pytest.raises(TemplateError):
            Template.from_file(path)

    def test_custom_directory(self, temp_dir):
        (temp_dir / "template-v9.yaml").write_text("outbounds: []\n", encoding="utf-8")
        assert list_template_versions(temp_dir) == ["v9"]
        assert Template.from_version("v9", temp_dir).data == {"outbounds": []}


class TestHelpers:

    def test_mirror_url(self):
        doc = {"url": "{mirror_url}/https://raw.example.com/a.srs", "list": ["{mirror_url}/x"]}
        replace_mirror_url(doc, "https://ghfast.top/")
        assert doc == {"url": "https://ghfast.top/https://raw.example.com/a.srs", "list": ["https://ghfast.top/x"]}

    def test_empty_mirror_url(self):
        doc = {"url": "{mirror_url}/https://raw.example.com/a.srs"}
        replace_mirror_url(doc, "")
        assert doc["url"] == "https://raw.example.com/a.srs"

    def test_insert_before_direct(self):
        doc = {"outbounds": [{"tag": "Proxy"}, {"tag": "DirectConn"}, {"tag": "block"}]}
        insert_outbounds(doc, [{"tag": "n1"}, {"tag": "n2"}])
        assert outbound_tags(doc) == ["Proxy", "n1", "n2", "DirectConn", "block"]

    def test_insert_appends_without_direct(self):
        doc = {"outbounds": [{"tag": "Proxy"}]}
        insert_outbounds(doc, [{"tag": "n1"}])
        assert outbound_tags(doc) == ["Proxy", "n1"]


class TestInject:

    def test_groups_projected_and_nodes_inserted(self):
        template = Template.from_version("v1.12")
        doc = template.inject(make_outbounds("🇭🇰 香港 01", "🇺🇸 US 01"), options())

        tags = outbound_tags(doc)
        assert "HongKong" in tags
        assert "America" in tags
        assert "Japan" not in tags
        assert "TaiWan" not in tags
        assert tags.index("🇭🇰 香港 01") < tags.index("DirectConn")

        assert find(doc, "HongKong")["outbounds"] == ["🇭🇰 香港 01"]
        proxy = find(doc, "Proxy")["outbounds"]
        assert "Japan" not in proxy
        assert proxy[-3:] == ["🇭🇰 香港 01", "🇺🇸 US 01", "DirectConn"]
        assert all("filter" not in block for block in doc["outbounds"])

    def test_template_data_not_mutated(self):
        template = Template.from_version("v1.12")
        template.inject(make_outbounds("HK 1"), options())
        assert find(template.data, "HongKong")["outbounds"] == ["{all}"]
        assert "filter" in find(template.data, "HongKong")

    def test_option_substitutions(self):
        doc = Template.from_version("v1.12").inject(
            make_outbounds("HK 1"),
            options(
                mirror_url="https://mirror.example.com",
                dns_server="223.6.6.6",
                client_subnet="202.101.170.1/24",
                external_controller="0.0.0.0:9999",
            ),
        )
        assert doc["route"]["rule_set"][0]["url"].startswith("https://mirror.example.com/https://")
        local = next(s for s in doc["dns"]["servers"] if s["tag"] == "dns_local")
        assert local["server"] == "223.6.6.6"
        assert doc["dns"]["client_subnet"] == "202.101.170.1/24"
        assert doc["experimental"]["clash_api"]["external_controller"] == "0.0.0.0:9999"

    def test_remove_emoji(self):
        doc = Template.from_version("v1.12").inject(make_outbounds("🇭🇰 香港 01"), options(remove_emoji=True))
        assert "香港 01" in outbound_tags(doc)
        assert find(doc, "HongKong")["outbounds"] == ["香港 01"]

    def test_platform_applied(self):
        doc = Template.from_version("v1.12").inject(make_outbounds("HK 1"), options(platform="darwin"))
        assert doc["inbounds"][0]["type"] == "tun"
        assert "path" not in doc["experimental"]["cache_file"]

    def test_unknown_platform(self):
        with pytest.raises(PlatformError):
            Template.from_version("v1.12").inject(make_outbounds("HK 1"), options(platform="plan9"))
