"""Tests for pubgate.npm.registry module."""

from __future__ import annotations

from pubgate.core.config import RegistryConfig
from pubgate.core.result import Err, Ok
from pubgate.npm.http import HttpError, MockHttpClient
from pubgate.npm.registry import NpmRegistryClient, RegistryDist, parse_packument


def _packument(latest: str = "1.0.1") -> dict[str, object]:
    return {
        "name": "left-pad",
        "dist-tags": {"latest": latest},
        "versions": {
            "1.0.0": {"dist": {"tarball": "https://r.example.com/left-pad/-/left-pad-1.0.0.tgz"}},
            "1.0.1": {
                "dist": {
                    "tarball": "https://r.example.com/left-pad/-/left-pad-1.0.1.tgz",
                    "integrity": "sha512-abc",
                    "shasum": "deadbeef",
                }
            },
        },
    }


class TestParsePackument:
    def test_latest_and_dists(self) -> None:
        result = parse_packument("left-pad", _packument())

        assert isinstance(result, Ok)
        pkg = result.value
        assert pkg.latest == "1.0.1"
        assert pkg.dist_for("1.0.1") == RegistryDist(
            tarball="https://r.example.com/left-pad/-/left-pad-1.0.1.tgz",
            integrity="sha512-abc",
            shasum="deadbeef",
        )
        assert pkg.dist_for("1.0.0") is not None
        assert pkg.dist_for("1.0.0").integrity is None  # type: ignore[union-attr]
        assert pkg.dist_for("9.9.9") is None

    def test_no_versions_is_not_found(self) -> None:
        result = parse_packument("gone", {"name": "gone", "versions": {}, "time": {"unpublished": {}}})

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_missing_latest_is_invalid(self) -> None:
        doc = _packument()
        doc["dist-tags"] = {}

        result = parse_packument("left-pad", doc)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid"

    def test_versions_without_dist_are_skipped(self) -> None:
        doc = _packument()
        doc["versions"] = {"1.0.1": {"name": "left-pad"}}

        result = parse_packument("left-pad", doc)

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"


class TestNpmRegistryClient:
    def test_packument_url_default(self) -> None:
        client = NpmRegistryClient(RegistryConfig(), http=MockHttpClient())
        assert client.packument_url("left-pad") == "https://registry.npmjs.org/left-pad"

    def test_packument_url_scoped(self) -> None:
        config = RegistryConfig.from_entries({"@acme:registry": "https://npm.acme.dev/"})
        client = NpmRegistryClient(config, http=MockHttpClient())

        assert client.packument_url("@acme/widgets") == "https://npm.acme.dev/@acme%2fwidgets"
        assert client.packument_url("@other/widgets") == "https://registry.npmjs.org/@other%2fwidgets"

    def test_package_sends_accept_and_token(self) -> None:
        http = MockHttpClient()
        http.set_json("https://r.example.com/left-pad", _packument())
        config = RegistryConfig.from_entries(
            {"registry": "https://r.example.com/", "//r.example.com/:_authToken": "tok"}
        )

        result = NpmRegistryClient(config, http=http).package("left-pad")

        assert isinstance(result, Ok)
        method, url, headers = http.calls[0]
        assert (method, url) == ("get_json", "https://r.example.com/left-pad")
        assert headers["Authorization"] == "Bearer tok"
        assert "application/vnd.npm.install-v1+json" in headers["Accept"]

    def test_package_without_token_sends_no_auth(self) -> None:
        http = MockHttpClient()
        http.set_json("https://registry.npmjs.org/left-pad", _packument())

        NpmRegistryClient(RegistryConfig(), http=http).package("left-pad")

        assert "Authorization" not in http.calls[0][2]

    def test_404_is_not_found(self) -> None:
        result = NpmRegistryClient(RegistryConfig(), http=MockHttpClient()).package("brand-new")

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_server_error_is_network(self) -> None:
        http = MockHttpClient()
        url = "https://registry.npmjs.org/left-pad"
        http.set_json(url, HttpError(url=url, status=503, message="Service Unavailable"))

        result = NpmRegistryClient(RegistryConfig(), http=http).package("left-pad")

        assert isinstance(result, Err)
        assert result.error.kind == "network"
        assert "503" in result.error.message

    def test_tarball_download(self) -> None:
        http = MockHttpClient()
        dist = RegistryDist(tarball="https://registry.npmjs.org/left-pad/-/left-pad-1.0.1.tgz")
        http.set_bytes(dist.tarball, b"tgz-bytes")

        assert NpmRegistryClient(RegistryConfig(), http=http).tarball(dist) == Ok(b"tgz-bytes")

    def test_tarball_404_is_network_error(self) -> None:
        dist = RegistryDist(tarball="https://registry.npmjs.org/left-pad/-/left-pad-1.0.1.tgz")

        result = NpmRegistryClient(RegistryConfig(), http=MockHttpClient()).tarball(dist)

        assert isinstance(result, Err)
        assert result.error.kind == "network"
