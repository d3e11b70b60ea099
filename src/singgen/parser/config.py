# URL scheme prefixes and the protocol each one maps to.
# `hy2://` is the short form of `hysteria2://`.
SCHEMES = {
    "vmess://": "vmess",
    "vless://": "vless",
    "trojan://": "trojan",
    "hysteria2://": "hysteria2",
    "hy2://": "hysteria2",
    "ss://": "shadowsocks",
}

PROTOCOLS = ("vmess", "vless", "trojan", "hysteria2", "shadowsocks")

# Format names returned by detect_format besides the protocols above
FORMAT_MIXED = "mixed"
FORMAT_UNKNOWN = "unknown"

# Input limits applied before format detection
MAX_INPUT_SIZE = 1024 * 1024
MAX_LINES = 10000
# base64 payloads can be long
MAX_LINE_LENGTH = 100000

SUSPICIOUS_PATTERNS = (
    "javascript:",
    "data:",
    "vbscript:",
    "<script",
    "</script>",
    "eval(",
    "exec(",
    "system(",
)

# Inputs longer than this many characters must be mostly ASCII
ASCII_CHECK_MIN_LENGTH = 100
MIN_ASCII_RATIO = 0.7

# Share of base64 alphabet characters above which a body is treated as base64
BASE64_RATIO = 0.9
