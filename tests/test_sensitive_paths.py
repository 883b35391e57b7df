"""Tests for the sensitive path probe and its content validators."""

import itertools

import pytest
import respx
from httpx import Response

from surfacescan.modules.scanner.sensitive_paths import (
    SENSITIVE_PATHS,
    SensitivePathProber,
    build_exposure_finding,
    looks_like_spa_fallback,
    matches_not_found_page,
    validate_exposure,
)
from surfacescan.tools.http import HTTPClient

SPA_INDEX = """<!DOCTYPE html>
<html lang="en">
  <head><meta charset="utf-8"><title>App</title></head>
  <body>
    <div id="root"></div>
    <script type="module" src="/assets/index-4f1c.js"></script>
  </body>
</html>"""

NEXT_INDEX = (
    '<html><body><div id="__next"></div>'
    '<script id="__NEXT_DATA__">{}</script></body></html>'
)

ENV_BODY = (
    "DATABASE_URL=postgres://user:pw@db/app\n"
    "STRIPE_SECRET=sk_live_x\n"
    "# comment\n"
    "A=1\nB=2\nC=3\n"
)

GIT_CONFIG = (
    "[core]\n\trepositoryformatversion = 0\n"
    '[remote "origin"]\n\turl = git@host:org/app.git\n'
)

ADMIN_PAGE = (
    "<html><head><title>Control Panel</title></head><body>"
    "<h1>Administration</h1><table><tr><td>Users</td><td>1,204</td></tr>"
    "<tr><td>Pending invoices</td><td>37</td></tr></table>"
    '<form method="post" action="/admin/flush"><button>Flush cache</button></form>'
    "</body></html>"
)


def _soft_404(note: str) -> str:
    return (
        "<html><head><title>Not Found</title></head><body>"
        "<h1>Sorry, that page does not exist</h1>"
        f"<p>{note}</p>"
        '<p>Return to the <a href="/">home page</a>.</p></body></html>'
    )


GENUINE_BODIES = {
    "/.env": ("text/plain", ENV_BODY),
    "/.env.local": ("text/plain", ENV_BODY),
    "/.env.production": ("application/octet-stream", ENV_BODY),
    "/.git/config": ("text/plain", GIT_CONFIG),
    "/package.json": ("application/json", '{"name": "app", "dependencies": {"react": "18"}}'),
    "/config.json": ("application/json", '{"apiUrl": "https://api.example.com"}'),
    "/database.json": ("application/json", '{"host": "db", "password": "x"}'),
    "/api/users": ("application/json", '[{"id": 1}]'),
    "/api/admin": ("application/json", '{"ok": true}'),
    "/api/config": ("application/json", '{"flags": {}}'),
    "/admin": ("text/html", "<html><body><h1>Admin login</h1></body></html>"),
    "/internal": ("text/html", "<html><body>internal tools</body></html>"),
    "/debug": ("text/plain", "debug toolbar"),
    "/wp-admin": ("text/html", "<html><body>WordPress &rsaquo; Log In wp-login.php</body></html>"),
    "/phpinfo.php": ("text/html", "<html><body><h1>PHP Version 8.2.1</h1></body></html>"),
}


class TestValidators:
    @pytest.mark.parametrize("entry", SENSITIVE_PATHS, ids=lambda entry: entry.path)
    def test_spa_fallback_is_rejected_for_every_path(self, entry):
        assert not validate_exposure(entry.path, "text/html", SPA_INDEX)
        assert not validate_exposure(entry.path, "text/html; charset=utf-8", NEXT_INDEX)

    @pytest.mark.parametrize("entry", SENSITIVE_PATHS, ids=lambda entry: entry.path)
    def test_genuine_artifact_is_accepted(self, entry):
        content_type, body = GENUINE_BODIES[entry.path]

        assert validate_exposure(entry.path, content_type, body)

    @pytest.mark.parametrize("entry", SENSITIVE_PATHS, ids=lambda entry: entry.path)
    def test_validation_is_idempotent(self, entry):
        content_type, body = GENUINE_BODIES[entry.path]
        first = validate_exposure(entry.path, content_type, body)

        assert validate_exposure(entry.path, content_type, body) is first
        assert validate_exposure(entry.path, "text/html", SPA_INDEX) is False
        assert validate_exposure(entry.path, "text/html", SPA_INDEX) is False

    def test_env_served_as_html_is_rejected(self):
        assert not validate_exposure("/.env", "text/html", ENV_BODY)

    def test_env_without_assignments_is_rejected(self):
        assert not validate_exposure("/.env", "text/plain", "nothing to see here")

    def test_git_config_requires_section_header(self):
        assert not validate_exposure("/.git/config", "text/plain", "Not Found")

    def test_package_json_requires_name_and_dependencies(self):
        assert not validate_exposure("/package.json", "application/json", '{"name": "app"}')
        assert not validate_exposure("/package.json", "application/json", "not json")

    def test_api_paths_reject_html(self):
        html = "<html><body>Welcome</body></html>"
        assert not validate_exposure("/api/users", "text/html", html)

    def test_unknown_path_is_never_valid(self):
        assert not validate_exposure("/nope", "text/plain", "A=1")

    def test_tiny_script_shell_is_spa(self):
        shell = '<html><head><script src="/bundle.js"></script></head></html>'

        assert looks_like_spa_fallback(shell)
        assert not looks_like_spa_fallback("A=1\nB=2\n")


class TestExposureFinding:
    def test_env_value_lists_key_names_only(self):
        entry = SENSITIVE_PATHS[0]
        finding = build_exposure_finding(entry, ENV_BODY)

        assert finding.identifier == "exposure--.env"
        assert finding.severity == "critical"
        assert finding.value == "DATABASE_URL, STRIPE_SECRET, A, B, C"
        assert "postgres" not in finding.value

    def test_env_value_counts_remaining_keys(self):
        body = "\n".join(f"KEY_{i}=v" for i in range(8))
        finding = build_exposure_finding(SENSITIVE_PATHS[0], body)

        assert finding.value == "KEY_0, KEY_1, KEY_2, KEY_3, KEY_4 (+3 more)"

    def test_wordpress_is_info(self):
        entry = next(e for e in SENSITIVE_PATHS if e.path == "/wp-admin")
        finding = build_exposure_finding(entry, "wordpress")

        assert finding.severity == "info"
        assert finding.label == "WordPress Detected"


class TestSensitivePathProber:
    @respx.mock(assert_all_called=False)
    async def test_spa_site_yields_single_pass(self, respx_mock, target):
        respx_mock.route().mock(return_value=Response(200, html=SPA_INDEX))

        async with HTTPClient() as client:
            result = await SensitivePathProber().run(target, client)

        assert len(result.findings) == 1
        assert result.findings[0].identifier == "sensitive-paths"
        assert result.findings[0].severity == "pass"

    @respx.mock(assert_all_called=False)
    async def test_reports_validated_exposures(self, respx_mock, target):
        respx_mock.route(host="example.com", path="/.env").mock(
            return_value=Response(200, text=ENV_BODY)
        )
        respx_mock.route(host="example.com", path="/.git/config").mock(
            return_value=Response(200, text=GIT_CONFIG)
        )
        respx_mock.route(host="example.com", path="/admin").mock(
            return_value=Response(200, html=SPA_INDEX)
        )
        respx_mock.route().mock(return_value=Response(404))

        async with HTTPClient() as client:
            result = await SensitivePathProber().run(target, client)

        identifiers = sorted(finding.identifier for finding in result.findings)
        assert identifiers == ["exposure--.env", "exposure--.git-config"]
        assert all(finding.severity == "critical" for finding in result.findings)

    @respx.mock(assert_all_called=False)
    async def test_only_status_200_counts(self, respx_mock, target):
        respx_mock.route(host="example.com", path="/.env").mock(
            return_value=Response(203, text=ENV_BODY)
        )
        respx_mock.route().mock(return_value=Response(403))

        async with HTTPClient() as client:
            result = await SensitivePathProber().run(target, client)

        assert [finding.identifier for finding in result.findings] == ["sensitive-paths"]

    @respx.mock(assert_all_called=False)
    async def test_catch_all_not_found_page_is_not_an_exposure(self, respx_mock, target):
        request_ids = itertools.count(1)

        def not_found_page(request):
            return Response(200, html=_soft_404(f"req-{next(request_ids):06d}"))

        respx_mock.route().mock(side_effect=not_found_page)

        async with HTTPClient() as client:
            result = await SensitivePathProber().run(target, client)

        assert [finding.identifier for finding in result.findings] == ["sensitive-paths"]

    @respx.mock(assert_all_called=False)
    async def test_real_admin_page_survives_not_found_baseline(self, respx_mock, target):
        respx_mock.route(host="example.com", path="/admin").mock(
            return_value=Response(200, html=ADMIN_PAGE)
        )
        respx_mock.route().mock(return_value=Response(200, html=_soft_404("req-000001")))

        async with HTTPClient() as client:
            result = await SensitivePathProber().run(target, client)

        assert [finding.identifier for finding in result.findings] == ["exposure--admin"]


class TestNotFoundBaseline:
    def test_page_echoing_its_path_matches(self):
        body = _soft_404("The page /admin was not found")
        baseline = _soft_404("The page /0f3a9c was not found")

        assert matches_not_found_page(body, "/admin", baseline, "/0f3a9c")

    def test_distinct_page_does_not_match(self):
        assert not matches_not_found_page(ADMIN_PAGE, "/admin", _soft_404("x"), "/0f3a9c")
