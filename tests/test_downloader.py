import pytest
import requests
from requests.utils import get_encoding_from_headers

from tvsearch2epg import __version__
from tvsearch2epg.downloader import USER_AGENT, FetchError, HttpFetcher, RateLimiter

URL = "https://tv.search.ch/channels"


def response(
    status_code=200, text="<html></html>", content_type="text/html; charset=utf-8", body=None
):
    """Response as the transport adapter builds it, encoding taken from the header"""
    result = requests.Response()
    result.status_code = status_code
    result.headers["Content-Type"] = content_type
    result._content = body if body is not None else text.encode("utf-8")
    result.encoding = get_encoding_from_headers(result.headers)
    return result


@pytest.fixture
def fetcher():
    fetcher = HttpFetcher(timeout=5)
    yield fetcher
    fetcher.close()


def stub_get(monkeypatch, fetcher, result):
    calls = []

    def get(url, timeout=None):
        calls.append((url, timeout))
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(fetcher.session, "get", get)
    return calls


def test_session_identity(fetcher):
    assert fetcher.session.headers["User-Agent"] == USER_AGENT
    assert fetcher.session.headers["Accept"] == "text/html"
    assert USER_AGENT == f"tvsearch2epg/{__version__}"


def test_success_returns_text_and_uses_timeout(monkeypatch, fetcher):
    calls = stub_get(monkeypatch, fetcher, response(text="<p>ok</p>"))

    assert fetcher.fetch(URL) == "<p>ok</p>"
    assert calls == [(URL, 5)]
    assert fetcher.get_stats() == {
        "total_requests": 1,
        "failed_requests": 0,
        "bytes_downloaded": 9,
    }


def test_utf8_body_without_declared_charset(monkeypatch, fetcher):
    page = "<html><h1>Zürich Krönung</h1></html>"
    stub_get(monkeypatch, fetcher, response(content_type="text/html", body=page.encode("utf-8")))

    assert fetcher.fetch(URL) == page


def test_declared_charset_is_respected(monkeypatch, fetcher):
    page = "<html><h1>Zürich</h1></html>"
    stub_get(
        monkeypatch,
        fetcher,
        response(content_type="text/html; charset=ISO-8859-1", body=page.encode("latin-1")),
    )

    assert fetcher.fetch(URL) == page


@pytest.mark.parametrize(
    "result, reason",
    [
        (response(status_code=404), "HTTP 404"),
        (response(text="  \n"), "Empty body"),
        (requests.exceptions.Timeout(), "Timeout (5s)"),
        (requests.exceptions.ConnectionError(), "Request error (ConnectionError)"),
    ],
)
def test_failures_raise_fetch_error(monkeypatch, fetcher, result, reason):
    stub_get(monkeypatch, fetcher, result)

    with pytest.raises(FetchError) as exc:
        fetcher.fetch_or_raise(URL)

    assert exc.value.reason == reason
    assert exc.value.url == URL
    assert fetcher.failed_requests == 1


def test_fetch_returns_none_on_failure(monkeypatch, fetcher):
    stub_get(monkeypatch, fetcher, response(status_code=500))

    assert fetcher.fetch(URL) is None


def test_closed_fetcher_fails():
    fetcher = HttpFetcher()
    fetcher.close()

    assert fetcher.fetch(URL) is None


def test_rate_limiter_is_applied(monkeypatch):
    waits = []
    limiter = RateLimiter(10)
    monkeypatch.setattr(limiter, "wait_if_needed", lambda: waits.append(1) or 0.0)
    fetcher = HttpFetcher(rate_limiter=limiter)
    stub_get(monkeypatch, fetcher, response())

    fetcher.fetch(URL)
    fetcher.fetch(URL)

    assert len(waits) == 2
    fetcher.close()


def test_rate_limiter_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        RateLimiter(0)


def test_rate_limiter_spaces_requests(monkeypatch):
    sleeps = []
    monkeypatch.setattr("tvsearch2epg.downloader.rate_limiting.time.sleep", sleeps.append)
    limiter = RateLimiter(2)

    assert limiter.wait_if_needed() == 0.0
    assert limiter.wait_if_needed() > 0
    assert 0 < sleeps[0] <= 0.5
    assert limiter.get_current_rate() == 2
