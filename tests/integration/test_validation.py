"""
End-to-end validation tests: query text in, diagnostics out.

Uses the packaged qualifier catalog unless a test passes its own table.
"""

from query_dsl.extractors import RepoInfo, get_repo_infos
from query_dsl.language import load_document
from query_dsl.symbols import SORT_VALUES


def messages(diagnostics):
    return [d.message for d in diagnostics]


class TestValidQueries:
    """Test documents that validate cleanly."""

    def test_typical_document(self, check):
        """Test a realistic document with variables, ranges and sort."""
        text = (
            "// my issues\n"
            "$me=octocat\n"
            "$since=2020-01-01\n"
            "is:open is:issue assignee:$me created:$since comments:1..10 sort:updated-desc\n"
            "is:pr -label:wontfix updated:2020-01-01..2021-01-01 OR is:closed\n"
        )
        assert check(text) == []

    def test_repeated_value(self, check):
        """Test that repeating the same exclusive value is allowed."""
        assert check("is:pr is:pr") == []


class TestInvalidQueries:
    """Test documents with semantic errors."""

    def test_mutual_exclusion_scenario(self, check):
        """Test `is:pr is:issue`: one conflict pointing at `is:pr`."""
        text = "is:pr is:issue"
        diagnostics = check(text)

        assert messages(diagnostics) == ["Conflicts with mutual exclusive expression"]
        conflict = diagnostics[0].conflict_node
        assert text[conflict.start:conflict.end] == "is:pr"
        assert text[diagnostics[0].start:diagnostics[0].end] == "is:issue"

    def test_exclusion_does_not_cross_lines(self, check):
        """Test that each query line has its own exclusions."""
        assert check("is:pr\nis:issue") == []

    def test_unknown_qualifier_scenario(self, check, small_symbols):
        """Test `label:bug` against a table without `label`."""
        assert messages(check("label:bug", small_symbols)) == ["Unknown qualifier: 'label'"]

    def test_unknown_qualifier_from_catalog(self, check):
        """Test a misspelled qualifier against the packaged catalog."""
        assert messages(check("lable:bug")) == ["Unknown qualifier: 'lable'"]

    def test_date_qualifier_with_text(self, check):
        """Test that a word is not a date."""
        assert messages(check("created:yesterday")) == ["Invalid value, expected date"]

    def test_number_qualifier_with_date(self, check):
        """Test that a date is not a number."""
        assert messages(check("comments:2020-01-01")) == ["Invalid value, expected number"]

    def test_variable_type_mismatch(self, check):
        """Test that a string variable cannot be used as a date."""
        assert messages(check("$who=octocat\ncreated:$who")) == ["Invalid value, expected date"]

    def test_unknown_variable(self, check):
        """Test a reference to an undefined variable."""
        assert messages(check("is:open $nope")) == ["Unknown variable"]

    def test_mixed_range(self, check):
        """Test a range from a number to a date."""
        assert messages(check("created:1..2020-01-01")) == ["Range must start and end with equals types"]

    def test_unknown_sort(self, check):
        """Test an unknown sort criteria lists all allowed values."""
        assert messages(check("sort:popularity")) == [
            f"Unknown value, must be one of: {', '.join(SORT_VALUES)}"
        ]

    def test_or_in_definition(self, check):
        """Test that OR cannot be used in a variable definition."""
        assert messages(check("$q=is:pr OR is:open")) == ["OR is not supported when defining a variable"]

    def test_self_reference(self, check):
        """Test that a definition cannot reference itself."""
        assert messages(check("$q=$q is:open")) == ["Cannot reference a variable from its definition"]

    def test_missing_value(self, check):
        """Test that `is:` is an unknown value and also carries the parser's message."""
        found = messages(check("is:"))
        assert len(found) == 2
        assert found[0].startswith("Unknown value, must be one of: locked, unlocked")
        assert found[1] == "Expected value"

    def test_missing_typed_values(self, check):
        """Test that `created:` and `comments:` fail their type check."""
        assert messages(check("created:")) == ["Invalid value, expected date", "Expected value"]
        assert messages(check("comments:")) == ["Invalid value, expected number", "Expected value"]

    def test_empty_definition(self, check):
        """Test that `$a=` reports the missing right-hand side."""
        assert messages(check("$a=")) == ["Expected value"]

    def test_empty_definition_before_query(self, check):
        """Test that lines after `$a= ` are still parsed and validated."""
        assert messages(check("$a= \nis:pr is:issue")) == [
            "Expected value",
            "Conflicts with mutual exclusive expression",
        ]

    def test_every_problem_in_one_pass(self, check):
        """Test that problems on several lines are all returned."""
        text = "lable:bug\nis:pr is:issue\ncreated:soon\nsort:"
        assert messages(check(text)) == [
            "Unknown qualifier: 'lable'",
            "Conflicts with mutual exclusive expression",
            "Invalid value, expected date",
            "Expected sort criteria",
        ]


class TestRepoExtraction:
    """Test extraction through the parser."""

    def test_quoted_repo(self, catalog_symbols):
        """Test `repo:"acme/widgets"`."""
        document, symbols = load_document('repo:"acme/widgets"', catalog_symbols)
        assert list(get_repo_infos(document, symbols)) == [RepoInfo("acme", "widgets")]

    def test_no_separator_and_leading_separator(self, catalog_symbols):
        """Test that values without an owner are skipped."""
        document, symbols = load_document('repo:"nöslash" repo:"/widgets"', catalog_symbols)
        assert list(get_repo_infos(document, symbols)) == []

    def test_variables_and_order(self, catalog_symbols):
        """Test variables and source order across lines."""
        text = '$r="octo/cat"\nrepo:acme/widgets\nrepo:$r'
        document, symbols = load_document(text, catalog_symbols)
        assert list(get_repo_infos(document, symbols)) == [
            RepoInfo("acme", "widgets"),
            RepoInfo("octo", "cat"),
        ]
