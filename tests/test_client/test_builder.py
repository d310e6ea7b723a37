"""Tests for the Tumblr client view: path building, modes, and dispatch."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import EMAIL, HOSTNAME, PASSWORD, FakeTransport
from tumblrkit.client import RESERVED_NAMES, Tumblr
from tumblrkit.exceptions import ConfigurationError, InvalidUsageError
from tumblrkit.models import HTTPMethod, OutputFormat, RequestDescriptor, ResponseEnvelope


# ---------------------------------------------------------------------------
# Path segments
# ---------------------------------------------------------------------------


class TestSegments:
    def test_attribute_access_appends_lowercased_segments(self, client: Tumblr) -> None:
        view = client.Posts.Tagged
        assert view.segments == ("posts", "tagged")

    def test_segment_method_matches_attribute_access(self, client: Tumblr) -> None:
        assert client.segment("posts").segment("Tagged").state == client.posts.tagged.state

    def test_receiver_is_not_mutated(self, client: Tumblr) -> None:
        posts = client.posts
        posts.tagged
        assert client.segments == ()
        assert posts.segments == ("posts",)

    def test_repeated_access_yields_equivalent_not_identical_views(self, client: Tumblr) -> None:
        first = client.posts
        second = client.posts
        assert first is not second
        assert first.state == second.state

    def test_configuration_calls_never_become_segments(self, client: Tumblr) -> None:
        view = (
            client.posts.test_mode()
            .output("json")
            .tagged.api_version("v1")
            .header_mode()
            .auth_mode()
            .set_hostname("other.tumblr.com")
            .dashboard
        )
        assert view.segments == ("posts", "tagged", "dashboard")

    @pytest.mark.parametrize("name", sorted(RESERVED_NAMES))
    def test_reserved_names_rejected_as_segments(self, client: Tumblr, name: str) -> None:
        with pytest.raises(InvalidUsageError):
            client.segment(name)

    @pytest.mark.parametrize("name", ["from_state", "close"])
    def test_client_methods_are_reserved(self, client: Tumblr, name: str) -> None:
        assert name in RESERVED_NAMES
        with pytest.raises(InvalidUsageError):
            client.segment(name)

    def test_empty_segment_rejected(self, client: Tumblr) -> None:
        with pytest.raises(InvalidUsageError):
            client.segment("  ")

    def test_private_names_are_not_segments(self, client: Tumblr) -> None:
        with pytest.raises(AttributeError):
            client._missing

    def test_calling_root_view_requires_an_action(self, client: Tumblr) -> None:
        with pytest.raises(InvalidUsageError):
            client()

    def test_repr_shows_host_and_path(self, client: Tumblr) -> None:
        assert repr(client.posts.tagged) == f"<Tumblr {HOSTNAME} posts/tagged>"


# ---------------------------------------------------------------------------
# Terminal calls in test mode
# ---------------------------------------------------------------------------


class TestTestMode:
    def test_read_example(self, client: Tumblr) -> None:
        result = client.test_mode().posts.read(tag="cats")
        assert isinstance(result, RequestDescriptor)
        assert result.url == "http://example.tumblr.com/api/v2/posts/read?tag=cats"
        assert result.method == HTTPMethod.GET
        assert result.body == ""

    def test_test_mode_skips_transport(self) -> None:
        transport = FakeTransport()
        client = Tumblr(HOSTNAME, EMAIL, PASSWORD, transport=transport)
        client.test_mode().posts.read()
        assert transport.calls == []

    def test_call_with_mapping_params(self, client: Tumblr) -> None:
        result = client.test_mode().posts.call("read", {"post-id": "7"}, num=2)
        assert result.url.endswith("/posts/read?post-id=7&num=2")

    def test_same_call_twice_is_identical(self, client: Tumblr) -> None:
        view = client.test_mode().posts
        assert view.read(tag="cats", num=5) == view.read(tag="cats", num=5)

    def test_json_output_suffix(self, client: Tumblr) -> None:
        result = client.test_mode().output("JSON").posts.read()
        assert result.url == "http://example.tumblr.com/api/v2/posts/read/json"
        assert result.output == OutputFormat.JSON

    def test_unknown_output_format(self, client: Tumblr) -> None:
        with pytest.raises(InvalidUsageError):
            client.output("yaml")

    def test_api_version_can_be_dropped(self, client: Tumblr) -> None:
        result = client.test_mode().api_version(None).posts.read()
        assert result.url == "http://example.tumblr.com/api/posts/read"

    def test_set_hostname(self, client: Tumblr) -> None:
        result = client.test_mode().set_hostname("other.tumblr.com").posts.read()
        assert result.url.startswith("http://other.tumblr.com/api/")


# ---------------------------------------------------------------------------
# One-shot auth mode
# ---------------------------------------------------------------------------


class TestAuthMode:
    def test_auth_mode_applies_to_exactly_one_call(self, client: Tumblr) -> None:
        view = client.test_mode().auth_mode()
        first = view.posts.write(title="hi")
        second = view.posts.write(title="hi")

        assert first.method == HTTPMethod.POST
        assert first.body == "email=me%40example.com&password=s3cret&title=hi"
        assert first.url == "http://example.tumblr.com/api/v2/posts/write"

        assert second.method == HTTPMethod.GET
        assert second.body == ""
        assert "password" not in second.url

    def test_ticket_is_shared_by_derived_views(self, client: Tumblr) -> None:
        view = client.test_mode().auth_mode()
        posts, likes = view.posts, view.likes
        assert posts.read().method == HTTPMethod.POST
        assert likes.read().method == HTTPMethod.GET

    def test_re_enabling_auth_mode_arms_a_new_ticket(self, client: Tumblr) -> None:
        view = client.test_mode().auth_mode()
        view.posts.read()
        assert view.auth_mode().posts.read().method == HTTPMethod.POST

    def test_auth_mode_false_disarms(self, client: Tumblr) -> None:
        view = client.test_mode().auth_mode().auth_mode(False)
        assert view.posts.read().method == HTTPMethod.GET

    def test_login_alias(self, client: Tumblr) -> None:
        assert client.test_mode().login().posts.read().method == HTTPMethod.POST

    def test_per_call_login_flag(self, client: Tumblr) -> None:
        view = client.test_mode()
        assert view.posts.read(login=True).method == HTTPMethod.POST
        assert view.posts.read().method == HTTPMethod.GET

    def test_auth_mode_does_not_leak_to_parent(self, client: Tumblr) -> None:
        base = client.test_mode()
        base.auth_mode()
        assert base.posts.read().method == HTTPMethod.GET

    def test_auth_hostname_receives_auth_requests(self, make_client) -> None:
        client = make_client(auth_hostname="www.tumblr.com").test_mode()
        assert client.login().write().url == "http://www.tumblr.com/api/v2/write"
        assert client.read().url == "http://example.tumblr.com/api/v2/read"


# ---------------------------------------------------------------------------
# oEmbed version override
# ---------------------------------------------------------------------------


class TestOembed:
    def test_oembed_omits_version_and_keeps_it_for_later_calls(self, client: Tumblr) -> None:
        view = client.test_mode().api_version("v2")
        embed = view.oembed(url="http://example.tumblr.com/post/1")
        assert embed.url.startswith("http://example.tumblr.com/api/oembed?url=")
        assert "/v2/" not in embed.url

        later = view.posts.read()
        assert later.url == "http://example.tumblr.com/api/v2/posts/read"
        assert view.state.api_version == "v2"


# ---------------------------------------------------------------------------
# Dispatch outside test mode
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_call_returns_envelope(self, make_client) -> None:
        transport = FakeTransport()
        client = make_client(transport=transport).output("json")
        result = client.posts.read(tag="cats")
        assert isinstance(result, ResponseEnvelope)
        assert result.status_code == 200
        assert transport.calls[0]["url"].endswith("/api/v2/posts/read/json?tag=cats")

    def test_auth_mode_consumed_by_real_call(self, make_client) -> None:
        transport = FakeTransport()
        view = make_client(transport=transport).output("json").auth_mode()
        view.write(title="x")
        view.write(title="x")
        assert [c["method"] for c in transport.calls] == [HTTPMethod.POST, HTTPMethod.GET]


# ---------------------------------------------------------------------------
# Construction and cache configuration
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_no_credentials_anywhere_fails(self) -> None:
        with pytest.raises(ConfigurationError):
            Tumblr()

    def test_environment_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TUMBLR_HOSTNAME", "env.tumblr.com")
        client = Tumblr()
        assert client.state.credentials.hostname == "env.tumblr.com"

    def test_missing_hostname_fails_at_composition(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TUMBLR_EMAIL", EMAIL)
        client = Tumblr().test_mode()
        with pytest.raises(ConfigurationError):
            client.posts.read()

    def test_from_state_skips_credential_lookup(self, client: Tumblr) -> None:
        clone = Tumblr.from_state(client.state.model_copy(update={"test_mode": True}))
        assert clone.posts.read().url.startswith(f"http://{HOSTNAME}/")


class TestCacheMode:
    def test_missing_directory_fails_eagerly(self, client: Tumblr, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            client.cache_mode(True, path=tmp_path / "nope")

    def test_enabling_records_settings(self, client: Tumblr, cache_dir: Path) -> None:
        view = client.cache_mode(True, ttl=60, path=cache_dir)
        assert view.state.cache.enabled is True
        assert view.state.cache.ttl_seconds == 60
        assert view.state.cache.directory == cache_dir
        assert client.state.cache.enabled is False

    def test_disabling_skips_directory_check(self, client: Tumblr, tmp_path: Path) -> None:
        view = client.cache_mode(False, path=tmp_path / "nope")
        assert view.state.cache.enabled is False

    def test_default_directory_is_xdg_cache(self, client: Tumblr) -> None:
        view = client.cache_mode()
        assert view.state.cache.enabled is True
        assert view.state.cache.directory is None

    def test_settings_carry_through_segments(self, client: Tumblr, cache_dir: Path) -> None:
        view = client.cache_mode(ttl=10, path=cache_dir).posts.tagged
        assert view.state.cache.ttl_seconds == 10


class TestClose:
    def test_context_manager_closes_owned_transport(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        closed: list[bool] = []

        class _Transport(FakeTransport):
            def close(self) -> None:
                closed.append(True)

        monkeypatch.setattr("tumblrkit.client.resolver.HttpxTransport", _Transport)
        with Tumblr(HOSTNAME) as client:
            client.output("json").posts.read()
        assert closed == [True]

    def test_close_leaves_injected_transport_alone(self, make_client) -> None:
        transport = FakeTransport()
        client = make_client(transport=transport).output("json")
        client.posts.read()
        client.close()
        client.posts.read()
        assert len(transport.calls) == 2
