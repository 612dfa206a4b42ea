"""Shared test fixtures for stepforge."""

import json
from pathlib import Path

import pytest

from stepforge.compiler import StepCompiler
from stepforge.registry import PatternRegistry
from stepforge.wiring import build_registry


@pytest.fixture
def registry() -> PatternRegistry:
    """A registry with every built-in pattern."""
    return build_registry()


@pytest.fixture
def compiler(registry: PatternRegistry) -> StepCompiler:
    return StepCompiler(registry)


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a temporary empty project directory."""
    return tmp_path


@pytest.fixture
def initialized_project(tmp_path: Path) -> Path:
    """Create a temporary project with stepforge initialized."""
    stepforge_dir = tmp_path / ".stepforge"
    stepforge_dir.mkdir()
    (tmp_path / "features").mkdir()

    config = {
        "version": "0.1.0",
        "output_target": "behave",
        "execution_target": "playwright",
        "group_by_kind": False,
        "features_dir": "features",
        "steps_dir": "features/steps",
        "pattern_files": [],
    }
    (stepforge_dir / "config.json").write_text(json.dumps(config, indent=2))
    return tmp_path


@pytest.fixture
def login_feature() -> str:
    """Return the three-step login scenario."""
    return """\
Feature: Login

  Scenario: Existing user logs in
    Given a user exists with email "a@b.com"
    When I visit the "login" page
    Then I should be logged in
"""


@pytest.fixture
def checkout_feature() -> str:
    """Return a feature using conjunctions, a doc string, a table and an outline."""
    return '''\
@checkout
Feature: Checkout
  Shoppers can pay for the items in their cart.

  Background:
    Given the user is logged in as "alice@example.com"
    And the "cart" store exists

  Scenario: Paying for a cart
    Given I am on the home page
    When I add item "Book" to the "cart" store array "items"
    And I click the "Checkout" button
    Then the "cart" store array "items" should have 1 item
    But I should not see the text "Payment failed"

  # API variant
  Scenario: Paying through the API
    When I send a POST request to "/api/orders" with body '{"sku": "BOOK-1"}'
    Then the response status should be 201
    And the response should contain "BOOK-1"

  Scenario Outline: Shipping options
    When I select "<option>" from the "Shipping" dropdown
    Then I should see the text "<label>"

    Examples:
      | option  | label         |
      | express | Next day      |
      | economy | Within a week |

  Scenario: Notes
    When I fill "Leave at door" into the "Notes" field
      """
      Ring twice
      """
    Then I should see the text "Saved"
    And I perform an unsupported ritual
'''


@pytest.fixture
def login_feature_file(tmp_path: Path, login_feature: str) -> Path:
    """Write the login feature to features/login.feature and return the path."""
    features_dir = tmp_path / "features"
    features_dir.mkdir(exist_ok=True)
    feature_file = features_dir / "login.feature"
    feature_file.write_text(login_feature)
    return feature_file


@pytest.fixture
def pattern_catalog(tmp_path: Path) -> Path:
    """Write a valid project pattern catalog and return its path."""
    path = tmp_path / "steps.yaml"
    path.write_text("""\
steps:
  - key: open-team-dashboard
    pattern: 'I open the dashboard for team "([^"]*)"'
    kind: setup
    params: [team]
    tags: [custom, navigation]
    description: Open a team dashboard
    example: 'I open the dashboard for team "core"'
    template: 'context.page.goto("/teams/" + {team!r})'
    templates:
      component: 'context.router.push("/teams/" + {team!r})'
  - key: archive-project
    pattern: 'I archive the project "([^"]*)"'
    kind: when
    params: [project]
    tags: [custom]
    template: 'context.client.post("/projects/" + {project!r} + "/archive")'
""")
    return path
