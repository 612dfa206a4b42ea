"""Unit tests for stepforge.extractor."""

import logging

import pytest

from stepforge.extractor import extract_steps, parse_table_row
from stepforge.models import StepKeyword

G, W, T = StepKeyword.GIVEN, StepKeyword.WHEN, StepKeyword.THEN


def _kinds(content: str) -> list[StepKeyword]:
    return [s.kind for s in extract_steps(content)]


# ── Basic extraction ──


class TestExtract:
    def test_simple_steps(self, login_feature: str) -> None:
        steps = extract_steps(login_feature)
        assert [s.text for s in steps] == [
            'a user exists with email "a@b.com"',
            'I visit the "login" page',
            "I should be logged in",
        ]
        assert [s.kind for s in steps] == [G, W, T]

    def test_original_and_line_numbers(self, login_feature: str) -> None:
        steps = extract_steps(login_feature)
        assert steps[0].original == 'Given a user exists with email "a@b.com"'
        assert steps[0].keyword == "Given"
        assert [s.line_number for s in steps] == [4, 5, 6]

    def test_scenario_name_recorded(self, login_feature: str) -> None:
        assert {s.scenario for s in extract_steps(login_feature)} == {"Existing user logs in"}

    def test_text_is_trimmed(self) -> None:
        steps = extract_steps("Given    lots of space   \t\n")
        assert steps[0].text == "lots of space"

    def test_empty_script(self) -> None:
        assert extract_steps("") == []

    def test_keyword_needs_whitespace(self) -> None:
        assert extract_steps("Givenchy is a brand\nWhenever\n") == []

    def test_non_step_lines_skipped(self, checkout_feature: str) -> None:
        texts = [s.text for s in extract_steps(checkout_feature)]
        assert not any(t.startswith("|") for t in texts)
        assert "Shoppers can pay for the items in their cart." not in texts
        assert "Ring twice" not in texts
        assert len(texts) == 15


# ── Conjunctions ──


class TestConjunctions:
    def test_and_but_inherit_previous_keyword(self) -> None:
        content = """\
Scenario: s
  Given a
  And b
  When c
  And d
  Then e
  But f
  * g
"""
        assert _kinds(content) == [G, G, W, W, T, T, T]

    def test_inheritance_resets_per_scenario(self) -> None:
        content = """\
Scenario: one
  Then a
Scenario: two
  And b
"""
        assert _kinds(content) == [T, G]

    def test_background_steps(self, checkout_feature: str) -> None:
        steps = extract_steps(checkout_feature)
        assert [s.kind for s in steps[:2]] == [G, G]
        assert steps[1].keyword == "And"
        assert steps[1].scenario == "Background"

    def test_checkout_kind_counts(self, checkout_feature: str) -> None:
        kinds = _kinds(checkout_feature)
        assert kinds.count(G) == 3
        assert kinds.count(W) == 5
        assert kinds.count(T) == 7

    def test_orphan_conjunction_defaults_to_given(self) -> None:
        assert _kinds("And something happens\n") == [G]


# ── Doc strings and tables ──


class TestTrailingContext:
    def test_doc_string_attached_to_previous_step(self) -> None:
        content = '''\
Scenario: s
  When I post
    """
    {"a": 1}
      indented
    """
  Then done
'''
        steps = extract_steps(content)
        assert len(steps) == 2
        assert steps[0].doc_string == '{"a": 1}\n  indented'
        assert steps[1].doc_string is None

    def test_backtick_fence(self) -> None:
        content = "Given x\n  ```\n  Then not a step\n  ```\nThen y\n"
        steps = extract_steps(content)
        assert [s.text for s in steps] == ["x", "y"]
        assert steps[0].doc_string == "Then not a step"

    def test_unclosed_doc_string_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        content = 'Given x\n  """\n  Then y\n'
        with caplog.at_level(logging.WARNING, logger="stepforge.extractor"):
            steps = extract_steps(content)
        assert [s.text for s in steps] == ["x", "y"]
        assert "Unclosed doc string" in caplog.text

    def test_table_attached_to_previous_step(self) -> None:
        content = """\
Given these users:
  | name  | role  |
  | alice | admin |
When I look
"""
        steps = extract_steps(content)
        assert len(steps) == 2
        assert steps[0].table == [["name", "role"], ["alice", "admin"]]
        assert steps[1].table == []

    def test_examples_rows_are_not_attached(self, checkout_feature: str) -> None:
        steps = extract_steps(checkout_feature)
        label_step = next(s for s in steps if s.text == 'I should see the text "<label>"')
        assert label_step.table == []

    def test_table_row_without_step_ignored(self) -> None:
        assert extract_steps("| a | b |\n") == []

    def test_rows_do_not_cross_scenarios(self) -> None:
        content = "Scenario: a\n  Given x\nScenario: b\n  | stray |\n"
        steps = extract_steps(content)
        assert steps[0].table == []


class TestParseTableRow:
    def test_cells(self) -> None:
        assert parse_table_row("| a | b c |") == ["a", "b c"]

    def test_escaped_pipe(self) -> None:
        assert parse_table_row(r"| a \| b | c |") == ["a | b", "c"]
