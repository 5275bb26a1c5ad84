import httpx
import pytest

from shortlink_app.enrichment.strategies import (
    HttpLinkEnricher,
    NullLinkEnricher,
    _reject_internal_target,
    extract_title,
)
from shortlink_app.models import ShortLink
from shortlink_app.network import is_public_target
from shortlink_app.schemas.link import LinkCreate
from shortlink_app.services.link_service import LinkService


def enricher_for(handler):
    return HttpLinkEnricher(client=httpx.Client(transport=httpx.MockTransport(handler)))


class FailingEnricher(NullLinkEnricher):
    def check_reachable(self, url):
        return False


class TestExtractTitle:

    def test_extracts_and_unescapes(self):
        document = "<html><head><TITLE lang='en'>\n  Fish &amp; Chips </TITLE></head></html>"
        assert extract_title(document) == "Fish & Chips"

    def test_missing_title(self):
        assert extract_title("<html><body>hi</body></html>") is None
        assert extract_title("<title>   </title>") is None

    def test_truncated(self):
        assert len(extract_title(f"<title>{'x' * 400}</title>")) == 255


class TestHttpLinkEnricher:

    def test_fetch_title(self):
        enricher = enricher_for(lambda request: httpx.Response(200, html="<title>Example Domain</title>"))
        assert enricher.fetch_title("https://example.com/") == "Example Domain"

    def test_fetch_title_failure_is_none(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert enricher_for(handler).fetch_title("https://example.com/") is None

    def test_fetch_title_error_status_is_none(self):
        enricher = enricher_for(lambda request: httpx.Response(404, html="<title>Not Found</title>"))
        assert enricher.fetch_title("https://example.com/") is None

    def test_check_reachable(self):
        assert enricher_for(lambda request: httpx.Response(200)).check_reachable("https://example.com/") is True
        assert enricher_for(lambda request: httpx.Response(503)).check_reachable("https://example.com/") is False

    def test_check_reachable_failure_is_none(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        assert enricher_for(handler).check_reachable("https://example.com/") is None

    def test_non_html_body_is_not_downloaded(self):
        consumed = []

        def body():
            for _ in range(200):
                consumed.append(1)
                yield b"PK" + b"\0" * (1024 * 1024)

        enricher = enricher_for(lambda request: httpx.Response(
            200, headers={"content-type": "application/zip"}, content=body()
        ))

        assert enricher.fetch_title("https://example.com/big.zip") is None
        assert len(consumed) <= 1

    def test_html_body_is_read_up_to_the_limit(self):
        consumed = []

        def body():
            yield b"<html><head><title>Big</title></head><body>"
            for _ in range(200):
                consumed.append(1)
                yield b"x" * (1024 * 1024)

        enricher = enricher_for(lambda request: httpx.Response(
            200, headers={"content-type": "text/html; charset=utf-8"}, content=body()
        ))

        assert enricher.fetch_title("https://example.com/") == "Big"
        assert len(consumed) <= 2

    def test_internal_targets_are_never_contacted(self):
        def handler(request):
            raise AssertionError("no request expected")

        enricher = enricher_for(handler)
        for url in ["http://127.0.0.1/", "http://localhost:8000/admin", "http://10.1.2.3/", "http://[::1]/"]:
            assert enricher.fetch_title(url) is None
            assert enricher.check_reachable(url) is None

    def test_redirect_hops_to_internal_targets_are_refused(self):
        with pytest.raises(httpx.RequestError):
            _reject_internal_target(httpx.Request("GET", "http://169.254.169.254/latest/meta-data"))
        _reject_internal_target(httpx.Request("GET", "https://example.com/"))


class TestIsPublicTarget:

    @pytest.mark.parametrize("url, expected", [
        ("https://example.com/", True),
        ("http://8.8.8.8/", True),
        ("http://192.168.1.1/", False),
        ("http://printer.local/", False),
        ("http://LOCALHOST/", False),
    ])
    def test_classification(self, url, expected):
        assert is_public_target(url) is expected


class TestCreateWithEnrichment:

    def test_unreachable_target_still_creates_link(self, db_session, user, caplog):
        service = LinkService(db_session, enricher=FailingEnricher())

        link = service.create_link(user, LinkCreate(original_url="https://unreachable.invalid/"))

        assert link.id is not None
        assert db_session.query(ShortLink).count() == 1
        assert "unreachable" in caplog.text
