"""
Pytest configuration for the singgen test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temporary directory fixtures
- Sample subscription data and candidate nodes
"""

import base64
import json
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from singgen.logging_config import setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    os.environ.setdefault("SINGGEN_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="singgen_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# ============================================================================
# SUBSCRIPTION FIXTURES
# ============================================================================

def make_vmess_url(tag="🇭🇰 香港 01", add="hk.example.com", port="443", net="ws", tls="tls"):
    payload = {
        "v": "2",
        "ps": tag,
        "add": add,
        "port": port,
        "id": "12345678-abcd-1234-5678-123456789abc",
        "aid": "0",
        "net": net,
        "host": add,
        "path": "/ray",
        "tls": tls,
        "sni": add,
    }
    encoded = base64.b64encode(json.dumps(payload, ensure_ascii=False).encode("utf-8")).decode("ascii")
    return "vmess://" + encoded


@pytest.fixture
def vmess_url():
    return make_vmess_url()


@pytest.fixture
def vmess_factory():
    return make_vmess_url


@pytest.fixture
def mixed_subscription():
    """Plain-text subscription holding one node per protocol."""
    return "\n".join([
        make_vmess_url(),
        "vless://b831381d-6324-4d53-ad4f-8cda48b30811@jp.example.com:443"
        "?security=tls&type=ws&path=%2Fws&sni=jp.example.com&flow=xtls-rprx-vision#%F0%9F%87%AF%F0%9F%87%B5%20Japan%2001",
        "trojan://secret@us.example.com:443?sni=us.example.com&allowInsecure=1#US%20Node",
        "hysteria2://pass@sg.example.com:8443?sni=sg.example.com&obfs=salamander&obfs-password=o#SG%20hy2",
        "ss://" + base64.urlsafe_b64encode(b"aes-256-gcm:sspass").decode("ascii") + "@tw.example.com:8388#TW%20ss",
    ])


@pytest.fixture
def subscription_file(temp_dir, mixed_subscription):
    path = temp_dir / "subscription.txt"
    path.write_text(base64.b64encode(mixed_subscription.encode("utf-8")).decode("ascii"), encoding="utf-8")
    return path


@pytest.fixture
def candidates():
    """Candidate nodes as plain mappings, the form the projector accepts."""
    return [
        {"tag": "🇭🇰 香港 01", "type": "vmess"},
        {"tag": "🇺🇸 US Node", "type": "trojan"},
        {"tag": "sec_us1", "type": "vless"},
        {"tag": "🇯🇵 Japan 01", "type": "vless"},
    ]
