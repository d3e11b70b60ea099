from unittest.mock import MagicMock

import pytest
import requests

from singgen.exceptions import FetchError
from singgen.fetcher import FileFetcher, HTTPFetcher, MAX_RESPONSE_SIZE, get_fetcher, is_url

pytestmark = pytest.mark.fast


def fake_session(status=200, chunks=(b"data",), error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        return session
    response = MagicMock()
    response.status_code = status
    response.iter_content.return_value = iter(chunks)
    session.get.return_value = response
    return session


class TestHTTPFetcher:

    def test_success_sends_headers_and_timeout(self):
        session = fake_session(chunks=(b"ab", b"cd"))
        fetcher = HTTPFetcher(timeout=5, session=session)
        assert fetcher.fetch("https://sub.example.com/x") == b"abcd"

        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["verify"] is True
        assert "Mozilla" in kwargs["headers"]["User-Agent"]

    def test_skip_tls_verify(self):
        session = fake_session()
        HTTPFetcher(skip_tls_verify=True, session=session).fetch("https://sub.example.com")
        assert session.get.call_args[1]["verify"] is False

    def test_non_200(self):
        with pytest.raises(FetchError, match="HTTP status 404"):
            HTTPFetcher(session=fake_session(status=404)).fetch("https://sub.example.com")

    def test_transport_error(self):
        session = fake_session(error=requests.ConnectionError("refused"))
        with pytest.raises(FetchError, match="HTTP request failed"):
            HTTPFetcher(session=session).fetch("https://sub.example.com")

    def test_oversized_body(self):
        chunk = b"x" * (MAX_RESPONSE_SIZE // 2 + 1)
        with pytest.raises(FetchError, match="larger than"):
            HTTPFetcher(session=fake_session(chunks=(chunk, chunk))).fetch("https://sub.example.com")

    @pytest.mark.parametrize("url", ["ftp://example.com/x", "file:///etc/passwd", "https:///nohost"])
    def test_invalid_urls(self, url):
        session = fake_session()
        with pytest.raises(FetchError):
            HTTPFetcher(session=session).fetch(url)
        session.get.assert_not_called()

    def test_private_address_allowed(self):
        assert HTTPFetcher(session=fake_session()).fetch("http://192.168.1.1/sub") == b"data"


class TestFileFetcher:

    def test_read(self, temp_dir):
        path = temp_dir / "sub.txt"
        path.write_bytes(b"vmess://x")
        assert FileFetcher().fetch(str(path)) == b"vmess://x"
        assert FileFetcher().fetch(path.as_uri()) == b"vmess://x"

    def test_missing(self, temp_dir):
        with pytest.raises(FetchError, match="does not exist"):
            FileFetcher().fetch(str(temp_dir / "missing.txt"))


def test_get_fetcher():
    assert isinstance(get_fetcher("https://a.example/sub"), HTTPFetcher)
    assert isinstance(get_fetcher("/tmp/sub.txt"), FileFetcher)
    assert isinstance(get_fetcher("file:///tmp/sub.txt"), FileFetcher)
    assert is_url("HTTP://A.EXAMPLE")
    assert not is_url("sub.txt")
