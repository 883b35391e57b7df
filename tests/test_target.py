"""Tests for target normalization."""

import pytest

from surfacescan.errors import InputError
from surfacescan.modules.scanner.scripts import same_origin
from surfacescan.modules.scanner.target import normalize_target, origin_of


class TestNormalizeTarget:
    def test_bare_host_gets_https(self):
        target = normalize_target("example.com")

        assert target.url == "https://example.com"
        assert target.origin == "https://example.com"
        assert target.scheme == "https"
        assert target.is_https

    def test_trailing_slash_is_trimmed(self):
        assert normalize_target("https://example.com/").url == "https://example.com"
        assert normalize_target("https://example.com/app/").url == "https://example.com/app"

    def test_path_and_query_are_kept_but_fragment_dropped(self):
        target = normalize_target("https://example.com/app?x=1#top")

        assert target.url == "https://example.com/app?x=1"
        assert target.origin == "https://example.com"

    def test_http_scheme_is_preserved(self):
        target = normalize_target("http://example.com")

        assert target.scheme == "http"
        assert not target.is_https

    def test_host_is_lowercased_and_port_kept(self):
        target = normalize_target("HTTPS://Example.COM:8443/")

        assert target.origin == "https://example.com:8443"
        assert target.host == "example.com:8443"
        assert target.domain == "example.com"

    @pytest.mark.parametrize(
        ("raw", "origin"),
        [
            ("münchen.de", "https://xn--mnchen-3ya.de"),
            ("my_host.example.com", "https://my_host.example.com"),
            ("example.com.", "https://example.com"),
            ("http://[::1]:8080/", "http://[::1]:8080"),
        ],
    )
    def test_valid_hosts_are_accepted(self, raw, origin):
        assert normalize_target(raw).origin == origin

    @pytest.mark.parametrize(
        "raw", ["https://example.com:443/app", "http://example.com:80/app"]
    )
    def test_default_port_is_dropped(self, raw):
        target = normalize_target(raw)

        assert target.origin == f"{target.scheme}://example.com"
        assert target.url == f"{target.origin}/app"
        assert same_origin("https://example.com/about", normalize_target("https://example.com:443"))

    def test_join_is_origin_relative(self):
        target = normalize_target("https://example.com/app")

        assert target.join("/.env") == "https://example.com/.env"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "ftp://example.com",
            "https://",
            "https://exa mple.com",
            "https://bad_host!.com",
            "https://example.com:99999",
        ],
    )
    def test_malformed_input_raises(self, raw):
        with pytest.raises(InputError):
            normalize_target(raw)

    def test_input_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_target("javascript:alert(1)")


class TestOriginOf:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/about",
            "https://EXAMPLE.com:443/about",
            "https://example.com./about",
        ],
    )
    def test_equivalent_forms_share_the_origin(self, url):
        assert origin_of(url) == "https://example.com"

    def test_unicode_host_matches_punycode_origin(self):
        assert origin_of("https://münchen.de/impressum") == "https://xn--mnchen-3ya.de"

    def test_explicit_port_is_part_of_the_origin(self):
        assert origin_of("https://example.com:8443/") == "https://example.com:8443"

    @pytest.mark.parametrize(
        "url", ["https://example.com/x\x01.js", "ftp://example.com/", "/relative/path"]
    )
    def test_unusable_urls_have_no_origin(self, url):
        assert origin_of(url) is None
