"""Tests for placeholder rendering."""

import pytest

from treestamp.errors import UndefinedVariable
from treestamp.render import (
    check_context,
    find_placeholders,
    manifest_variables,
    missing_variables,
    render,
)
from treestamp.schemas.manifest import DirectoryEntry, FileEntry, Manifest


class TestFindPlaceholders:
    def test_order_of_first_appearance(self):
        text = "{{b}} {{a}} {{ b }} {{c.d}}"

        assert find_placeholders(text) == ["b", "a", "c.d"]

    def test_non_variable_braces_are_ignored(self):
        assert find_placeholders("{{ 1 + 1 }} {{}} {{ x y }} {single}") == []


class TestRender:
    def test_substitutes_every_occurrence(self):
        assert render("{{name}}/{{ name }}", {"name": "crm"}) == "crm/crm"

    def test_hyphenated_names(self):
        assert render("{{project-name}}", {"project-name": "noe-crm"}) == "noe-crm"

    def test_values_are_not_rescanned(self):
        result = render("{{a}}", {"a": "{{b}}", "b": "nope"})

        assert result == "{{b}}"

    def test_literal_text_is_untouched(self):
        text = "function() { return {{ 1 + 1 }}; } {{"

        assert render(text, {}) == text

    def test_missing_variables_are_all_reported(self):
        with pytest.raises(UndefinedVariable) as exc_info:
            render("{{a}} {{known}} {{b}}", {"known": "x"}, path="docs/readme.md")

        error = exc_info.value
        assert error.variables == ["a", "b"]
        assert error.path == "docs/readme.md"
        assert error.to_dict()["variables"] == ["a", "b"]


class TestManifestVariables:
    @pytest.fixture
    def manifest(self) -> Manifest:
        return Manifest(
            entries=[
                DirectoryEntry(path="app"),
                FileEntry(path="app/a.txt", content="{{zeta}} {{alpha}}"),
                FileEntry(path="app/b.txt", content="{{alpha}} {{port}}"),
            ]
        )

    def test_manifest_variables_sorted(self, manifest: Manifest):
        assert manifest_variables(manifest) == ["alpha", "port", "zeta"]

    def test_missing_variables(self, manifest: Manifest):
        assert missing_variables(manifest, {"alpha": "1"}) == ["port", "zeta"]

    def test_check_context_names_first_failing_entry(self, manifest: Manifest):
        with pytest.raises(UndefinedVariable) as exc_info:
            check_context(manifest, {"alpha": "1", "zeta": "2"})

        assert exc_info.value.path == "app/b.txt"
        assert exc_info.value.variables == ["port"]

    def test_check_context_passes_when_complete(self, manifest: Manifest):
        check_context(manifest, {"alpha": "1", "zeta": "2", "port": "80"})
