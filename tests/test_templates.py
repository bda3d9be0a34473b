"""Tests for shiorictl.templates (descriptor registry + placeholder resolver)."""

import pytest

from shiorictl.errors import UnknownOperation
from shiorictl.templates import REGISTRY, json_escape, lookup, resolve


class TestRegistry:
    def test_contains_exactly_five_operations(self):
        assert set(REGISTRY) == {"login", "bookmarks", "article", "add", "delete"}

    @pytest.mark.parametrize("name,method,path", [
        ("login", "POST", "/api/v1/auth/login"),
        ("bookmarks", "GET", "/api/bookmarks"),
        ("article", "GET", "/bookmark/:id/content"),
        ("add", "POST", "/api/bookmarks"),
        ("delete", "DELETE", "/api/bookmarks"),
    ])
    def test_shapes(self, name, method, path):
        descriptor = lookup(name)
        assert descriptor.method == method
        assert descriptor.path == path

    def test_login_has_no_auth_header(self):
        login = lookup("login")
        assert not login.requires_auth
        assert login.header_templates == ("Content-Type: application/json",)
        assert '"remember": true' in login.body_template

    @pytest.mark.parametrize("name", ["bookmarks", "article", "add", "delete"])
    def test_authenticated_operations_carry_bearer_header(self, name):
        descriptor = lookup(name)
        assert descriptor.requires_auth
        assert "Authorization: Bearer :token" in descriptor.header_templates
        assert "Content-Type: application/json" in descriptor.header_templates

    def test_get_operations_have_no_body(self):
        assert lookup("bookmarks").body_template is None
        assert lookup("article").body_template is None

    def test_placeholders(self):
        assert lookup("login").placeholders == {"username", "password"}
        assert lookup("bookmarks").placeholders == {"token"}
        assert lookup("article").placeholders == {"token", "id"}
        assert lookup("add").placeholders == {"token", "new-url"}
        assert lookup("delete").placeholders == {"token", "ids"}

    def test_unknown_operation(self):
        with pytest.raises(UnknownOperation) as exc:
            lookup("archive")
        assert exc.value.name == "archive"

    def test_descriptors_are_immutable(self):
        with pytest.raises(AttributeError):
            lookup("add").method = "PUT"


class TestResolve:
    def test_substitutes_every_occurrence(self):
        assert resolve(":a-:a", {"a": "x"}) == "x-x"

    def test_unmatched_placeholder_passes_through(self):
        assert resolve("/bookmark/:id/content", {"token": "abc"}) == "/bookmark/:id/content"

    def test_no_recursive_expansion(self):
        # the value of "a" contains ":a" but is not re-expanded by its own pass
        assert resolve(":a", {"a": ":a!"}) == ":a!"

    def test_left_to_right_once_per_key(self):
        # ":b" introduced by the first key is picked up by the later pass for "b"
        assert resolve(":a", {"a": ":b", "b": "done"}) == "done"
        # but not when "b" was applied before "a"
        assert resolve(":a", {"b": "done", "a": ":b"}) == ":b"

    def test_plain_substring_not_regex(self):
        assert resolve("x:a.b", {"a.b": "y"}) == "xy"
        assert resolve("x:a.b", {"a": "y"}) == "xy.b"

    def test_idempotent(self):
        template = '{"url": ":new-url"}'
        args = {"new-url": "https://example.com", "token": "abc"}
        assert resolve(template, args) == resolve(template, args)

    def test_non_string_values_are_stringified(self):
        assert resolve("/bookmark/:id/content", {"id": 7}) == "/bookmark/7/content"


class TestJsonEscape:
    def test_plain_value_unchanged(self):
        assert json_escape("https://example.com/a?b=1") == "https://example.com/a?b=1"

    def test_quotes_and_backslashes(self):
        assert json_escape('pa"ss\\word') == 'pa\\"ss\\\\word'

    def test_keeps_unicode(self):
        assert json_escape("pässwörd") == "pässwörd"
