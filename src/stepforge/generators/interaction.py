"""Step patterns for clicks, form input and on-screen assertions."""

from __future__ import annotations

from stepforge.generators.helpers import browser, first, kebab_case, quote
from stepforge.models import Captures, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry

_FIELD = r'(?:the )?(?:"([^"]*)"|([^"]*?))'


def _test_id(name: str) -> str:
    return quote(f'[data-testid="{kebab_case(name)}"]')


def click_button(captures: Captures, options: GenerationOptions) -> str:
    label = quote(first(captures[0]))
    if browser(options):
        return f'context.page.get_by_role("button", name={label}).click()'
    return f'context.component.find_by_text("button", {label}).trigger("click")'


def click_link(captures: Captures, options: GenerationOptions) -> str:
    label = quote(first(captures[0]))
    if browser(options):
        return f'context.page.get_by_role("link", name={label}).click()'
    return f'context.component.find_by_text("a", {label}).trigger("click")'


def click_element(captures: Captures, options: GenerationOptions) -> str:
    selector = quote(first(captures[0]))
    if browser(options):
        return f"context.page.locator({selector}).click()"
    return f'context.component.find({selector}).trigger("click")'


def fill_input(captures: Captures, options: GenerationOptions) -> str:
    value = quote(captures[0] or "")
    field = quote(first(captures[1], captures[2]))
    if browser(options):
        return f"context.page.get_by_label({field}).fill({value})"
    return f"context.component.find_field({field}).set_value({value})"


def clear_input(captures: Captures, options: GenerationOptions) -> str:
    field = quote(first(captures[0], captures[1]))
    if browser(options):
        return f"context.page.get_by_label({field}).clear()"
    return f'context.component.find_field({field}).set_value("")'


def select_option(captures: Captures, options: GenerationOptions) -> str:
    value = quote(captures[0] or "")
    field = quote(first(captures[1], captures[2]))
    if browser(options):
        return f"context.page.get_by_label({field}).select_option({value})"
    return f"context.component.find_field({field}).set_value({value})"


def _checkbox(captures: Captures, options: GenerationOptions, checked: bool) -> str:
    field = quote(first(captures[0], captures[1]))
    if browser(options):
        action = "check" if checked else "uncheck"
        return f"context.page.get_by_label({field}).{action}()"
    return f"context.component.find_field({field}).set_checked({checked})"


def check_checkbox(captures: Captures, options: GenerationOptions) -> str:
    return _checkbox(captures, options, True)


def uncheck_checkbox(captures: Captures, options: GenerationOptions) -> str:
    return _checkbox(captures, options, False)


def hover_element(captures: Captures, options: GenerationOptions) -> str:
    name = first(captures[0], captures[1])
    if browser(options):
        return f"context.page.get_by_test_id({quote(kebab_case(name))}).hover()"
    return f'context.component.find({_test_id(name)}).trigger("mouseenter")'


def should_see_text(captures: Captures, options: GenerationOptions) -> str:
    text = quote(captures[0] or "")
    if browser(options):
        return f"expect(context.page.get_by_text({text})).to_be_visible()"
    return f"assert {text} in context.component.text()"


def should_not_see_text(captures: Captures, options: GenerationOptions) -> str:
    text = quote(captures[0] or "")
    if browser(options):
        return f"expect(context.page.get_by_text({text})).not_to_be_visible()"
    return f"assert {text} not in context.component.text()"


def should_see_element(captures: Captures, options: GenerationOptions) -> str:
    name = first(captures[0])
    if browser(options):
        return f"expect(context.page.get_by_test_id({quote(kebab_case(name))})).to_be_visible()"
    return f"assert context.component.find({_test_id(name)}).is_visible()"


def _enabled(captures: Captures, options: GenerationOptions, enabled: bool) -> str:
    name = first(captures[0], captures[1])
    if browser(options):
        check = "to_be_enabled" if enabled else "to_be_disabled"
        return f"expect(context.page.get_by_test_id({quote(kebab_case(name))})).{check}()"
    prefix = "" if enabled else "not "
    return f"assert {prefix}context.component.find({_test_id(name)}).is_enabled()"


def element_should_be_enabled(captures: Captures, options: GenerationOptions) -> str:
    return _enabled(captures, options, True)


def element_should_be_disabled(captures: Captures, options: GenerationOptions) -> str:
    return _enabled(captures, options, False)


def component_should_emit(captures: Captures, options: GenerationOptions) -> str:
    component = quote(first(captures[0], captures[1]))
    event = quote(captures[2] or "")
    if browser(options):
        return "\n".join([
            "emitted = context.page.evaluate(",
            '    "([name, event]) => (window.__emitted__ || []).some('
            '(e) => e.component === name && e.event === event)",',
            f"    [{component}, {event}],",
            ")",
            f"assert emitted, {quote('expected event was not emitted')}",
        ])
    return "\n".join([
        f"events = context.component.find_component({component}).emitted()",
        f"assert {event} in events",
    ])


STEPS: list[tuple[str, PatternDescriptor]] = [
    ("click-button", PatternDescriptor(
        pattern=r'I click (?:the|on) "([^"]*)" button',
        kind=StepKind.ACTION,
        generate=click_button,
        params=("label",),
        tags=("component", "interaction", "click"),
        description="Click a button by its accessible name",
        example='I click the "Submit" button',
    )),
    ("click-link", PatternDescriptor(
        pattern=r'I click (?:the|on) "([^"]*)" link',
        kind=StepKind.ACTION,
        generate=click_link,
        params=("label",),
        tags=("component", "interaction", "navigation"),
        description="Click a link by its text",
        example='I click the "Pricing" link',
    )),
    ("click-element", PatternDescriptor(
        pattern=r'I click (?:the|on) element "([^"]*)"',
        kind=StepKind.ACTION,
        generate=click_element,
        params=("selector",),
        tags=("component", "interaction", "generic"),
        description="Click any element by CSS selector",
        example='I click on element "#menu-toggle"',
    )),
    ("fill-input", PatternDescriptor(
        pattern=r'I (?:fill|enter|type) "([^"]*)" (?:in|into) ' + _FIELD + r" (?:field|input)",
        kind=StepKind.ACTION,
        generate=fill_input,
        params=("value", "quoted_field", "field"),
        tags=("component", "form", "input"),
        description="Fill an input field with a value",
        example='I fill "alice@example.com" into the "Email" field',
    )),
    ("clear-input", PatternDescriptor(
        pattern=r"I clear " + _FIELD + r" (?:field|input)",
        kind=StepKind.ACTION,
        generate=clear_input,
        params=("quoted_field", "field"),
        tags=("component", "form", "input"),
        description="Clear an input field",
        example='I clear the "Search" field',
    )),
    ("select-option", PatternDescriptor(
        pattern=r'I select "([^"]*)" from ' + _FIELD + r" (?:dropdown|select)",
        kind=StepKind.ACTION,
        generate=select_option,
        params=("value", "quoted_field", "field"),
        tags=("component", "form", "select"),
        description="Select an option from a dropdown",
        example='I select "Canada" from the "Country" dropdown',
    )),
    ("check-checkbox", PatternDescriptor(
        pattern=r"I (?:check|tick) " + _FIELD + r" checkbox",
        kind=StepKind.ACTION,
        generate=check_checkbox,
        params=("quoted_field", "field"),
        tags=("component", "form", "checkbox"),
        description="Check a checkbox",
        example='I check the "Remember me" checkbox',
    )),
    ("uncheck-checkbox", PatternDescriptor(
        pattern=r"I (?:uncheck|untick) " + _FIELD + r" checkbox",
        kind=StepKind.ACTION,
        generate=uncheck_checkbox,
        params=("quoted_field", "field"),
        tags=("component", "form", "checkbox"),
        description="Uncheck a checkbox",
        example='I uncheck the "Newsletter" checkbox',
    )),
    ("hover-element", PatternDescriptor(
        pattern=r"I hover over " + _FIELD + r" (?:element|component)",
        kind=StepKind.ACTION,
        generate=hover_element,
        params=("quoted_name", "name"),
        tags=("component", "interaction", "hover"),
        description="Hover over an element",
        example='I hover over the "Profile" element',
    )),
    ("should-see-text", PatternDescriptor(
        pattern=r'I should see (?:the )?text "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_see_text,
        params=("text",),
        tags=("component", "verification", "text"),
        description="Verify text is visible on the page",
        example='I should see the text "Welcome back"',
    )),
    ("should-not-see-text", PatternDescriptor(
        pattern=r'I should not see (?:the )?text "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_not_see_text,
        params=("text",),
        tags=("component", "verification", "text"),
        description="Verify text is not visible on the page",
        example='I should not see the text "Error"',
    )),
    ("should-see-element", PatternDescriptor(
        pattern=r'I should see (?:the|an?) "([^"]*)" (?:element|component)',
        kind=StepKind.ASSERTION,
        generate=should_see_element,
        params=("name",),
        tags=("component", "verification", "element"),
        description="Verify an element is visible",
        example='I should see the "cart-badge" element',
    )),
    ("element-should-be-enabled", PatternDescriptor(
        pattern=_FIELD + r" (?:element|button|input) should be enabled",
        kind=StepKind.ASSERTION,
        generate=element_should_be_enabled,
        params=("quoted_name", "name"),
        tags=("component", "verification", "state"),
        description="Verify an element is enabled",
        example='the "Save" button should be enabled',
    )),
    ("element-should-be-disabled", PatternDescriptor(
        pattern=_FIELD + r" (?:element|button|input) should be disabled",
        kind=StepKind.ASSERTION,
        generate=element_should_be_disabled,
        params=("quoted_name", "name"),
        tags=("component", "verification", "state"),
        description="Verify an element is disabled",
        example='the "Save" button should be disabled',
    )),
    ("component-should-emit", PatternDescriptor(
        pattern=_FIELD + r' component should emit "([^"]*)" event',
        kind=StepKind.ASSERTION,
        generate=component_should_emit,
        params=("quoted_component", "component", "event"),
        tags=("component", "events", "verification"),
        description="Verify a component emits an event",
        example='the "SearchBox" component should emit "submit" event',
    )),
]


def register_steps(registry: PatternRegistry) -> None:
    registry.register_many(STEPS)
