"""Step patterns for reactive store state, mutations and assertions.

In the browser the stores are reached through ``window.__stores__``; in
process they are the objects in ``context.stores``.
"""

from __future__ import annotations

from stepforge.generators.helpers import browser, first, quote
from stepforge.models import Captures, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry

_STORE = r'(?:the )?(?:"([^"]*)"|([^"]*?))'


def _name(captures: Captures) -> str:
    return quote(first(captures[0], captures[1]))


def _evaluate(script: str, *args: str) -> str:
    return f"context.page.evaluate({quote(script)}, [{', '.join(args)}])"


def _read(captures: Captures, options: GenerationOptions, key: str) -> str:
    if browser(options):
        return _evaluate("([name, key]) => window.__stores__[name][key]", _name(captures), key)
    return f"context.stores[{_name(captures)}].state[{key}]"


def given_store_exists(captures: Captures, options: GenerationOptions) -> str:
    name = _name(captures)
    if browser(options):
        return (
            "context.page.wait_for_function("
            f"{quote('(name) => Boolean(window.__stores__ && window.__stores__[name])')}, "
            f"arg={name})"
        )
    return "\n".join([
        'context.stores = getattr(context, "stores", {})',
        f"context.stores[{name}] = context.create_store({name})",
    ])


def set_store_property(captures: Captures, options: GenerationOptions) -> str:
    key, value = quote(captures[2] or ""), quote(captures[3] or "")
    if browser(options):
        return _evaluate(
            "([name, key, value]) => { window.__stores__[name][key] = value }",
            _name(captures), key, value,
        )
    return f"context.stores[{_name(captures)}].state[{key}] = {value}"


def call_store_action(captures: Captures, options: GenerationOptions) -> str:
    action = captures[2] or ""
    if browser(options):
        return _evaluate(
            "([name, action]) => window.__stores__[name][action]()",
            _name(captures), quote(action),
        )
    return f"getattr(context.stores[{_name(captures)}], {quote(action)})()"


def reset_store(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return _evaluate("([name]) => window.__stores__[name].$reset()", _name(captures))
    return f"context.stores[{_name(captures)}].reset()"


def _array_item(captures: Captures, options: GenerationOptions, add: bool) -> str:
    item, array = quote(captures[0] or ""), quote(captures[3] or "")
    name = quote(first(captures[1], captures[2]))
    if browser(options):
        script = (
            "([name, key, item]) => window.__stores__[name][key].push(item)"
            if add else
            "([name, key, item]) => { const list = window.__stores__[name][key]; "
            "list.splice(list.indexOf(item), 1) }"
        )
        return _evaluate(script, name, array, item)
    method = "append" if add else "remove"
    return f"context.stores[{name}].state[{array}].{method}({item})"


def add_item_to_store_array(captures: Captures, options: GenerationOptions) -> str:
    return _array_item(captures, options, True)


def remove_item_from_store_array(captures: Captures, options: GenerationOptions) -> str:
    return _array_item(captures, options, False)


def store_property_should_be(captures: Captures, options: GenerationOptions) -> str:
    actual = _read(captures, options, quote(captures[2] or ""))
    return f"assert {actual} == {quote(captures[3] or '')}"


def store_property_should_be_number(captures: Captures, options: GenerationOptions) -> str:
    actual = _read(captures, options, quote(captures[2] or ""))
    return f"assert {actual} == {int(captures[3] or 0)}"


def store_array_should_have_length(captures: Captures, options: GenerationOptions) -> str:
    actual = _read(captures, options, quote(captures[2] or ""))
    return f"assert len({actual}) == {int(captures[3] or 0)}"


def store_array_should_contain(captures: Captures, options: GenerationOptions) -> str:
    actual = _read(captures, options, quote(captures[2] or ""))
    return f"assert {quote(captures[3] or '')} in {actual}"


def store_getter_should_return(captures: Captures, options: GenerationOptions) -> str:
    getter, expected = quote(captures[2] or ""), quote(captures[3] or "")
    if browser(options):
        actual = _evaluate(
            "([name, getter]) => window.__stores__[name][getter]", _name(captures), getter
        )
    else:
        actual = f"getattr(context.stores[{_name(captures)}], {getter})"
    return f"assert str({actual}) == {expected}"


def store_should_be_loading(captures: Captures, options: GenerationOptions) -> str:
    return f"assert {_read(captures, options, quote('loading'))} is True"


def store_should_not_be_loading(captures: Captures, options: GenerationOptions) -> str:
    return f"assert not {_read(captures, options, quote('loading'))}"


def store_should_have_error(captures: Captures, options: GenerationOptions) -> str:
    actual = _read(captures, options, quote("error"))
    if captures[2]:
        return f"assert {actual} == {quote(captures[2])}"
    return f"assert {actual}"


STEPS: list[tuple[str, PatternDescriptor]] = [
    ("given-store-exists", PatternDescriptor(
        pattern=_STORE + r" store exists",
        kind=StepKind.SETUP,
        generate=given_store_exists,
        params=("quoted_store", "store"),
        tags=("store", "state", "setup"),
        description="Make a store available",
        example='the "cart" store exists',
    )),
    ("given-store-state-property", PatternDescriptor(
        pattern=_STORE + r' store has "([^"]*)" set to "([^"]*)"',
        kind=StepKind.SETUP,
        generate=set_store_property,
        params=("quoted_store", "store", "property", "value"),
        tags=("store", "state", "setup"),
        description="Seed a store property",
        example='the "cart" store has "currency" set to "EUR"',
    )),
    ("when-update-store-property", PatternDescriptor(
        pattern=r"I (?:set|update) " + _STORE + r' store property "([^"]*)" to "([^"]*)"',
        kind=StepKind.ACTION,
        generate=set_store_property,
        params=("quoted_store", "store", "property", "value"),
        tags=("store", "state", "mutation"),
        description="Mutate a store property",
        example='I set the "cart" store property "currency" to "USD"',
    )),
    ("when-call-store-action", PatternDescriptor(
        pattern=r"I call " + _STORE + r' store action "([^"]*)"',
        kind=StepKind.ACTION,
        generate=call_store_action,
        params=("quoted_store", "store", "action"),
        tags=("store", "actions"),
        description="Call a store action",
        example='I call the "cart" store action "checkout"',
    )),
    ("when-reset-store", PatternDescriptor(
        pattern=r"I reset " + _STORE + r" store",
        kind=StepKind.ACTION,
        generate=reset_store,
        params=("quoted_store", "store"),
        tags=("store", "state", "reset"),
        description="Reset a store to its initial state",
        example='I reset the "cart" store',
    )),
    ("when-add-item-to-store-array", PatternDescriptor(
        pattern=r'I add item "([^"]*)" to ' + _STORE + r' store array "([^"]*)"',
        kind=StepKind.ACTION,
        generate=add_item_to_store_array,
        params=("item", "quoted_store", "store", "array"),
        tags=("store", "array", "mutation"),
        description="Append an item to a store array",
        example='I add item "Book" to the "cart" store array "items"',
    )),
    ("when-remove-item-from-store-array", PatternDescriptor(
        pattern=r'I remove item "([^"]*)" from ' + _STORE + r' store array "([^"]*)"',
        kind=StepKind.ACTION,
        generate=remove_item_from_store_array,
        params=("item", "quoted_store", "store", "array"),
        tags=("store", "array", "mutation"),
        description="Remove an item from a store array",
        example='I remove item "Book" from the "cart" store array "items"',
    )),
    ("then-store-property-should-be", PatternDescriptor(
        pattern=_STORE + r' store property "([^"]*)" should be "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=store_property_should_be,
        params=("quoted_store", "store", "property", "value"),
        tags=("store", "verification", "state"),
        description="Verify a store property equals a string",
        example='the "cart" store property "currency" should be "EUR"',
    )),
    ("then-store-property-should-be-number", PatternDescriptor(
        pattern=_STORE + r' store property "([^"]*)" should be (\d+)',
        kind=StepKind.ASSERTION,
        generate=store_property_should_be_number,
        params=("quoted_store", "store", "property", "value"),
        tags=("store", "verification", "state"),
        description="Verify a store property equals a number",
        example='the "cart" store property "total" should be 42',
    )),
    ("then-store-array-should-have-length", PatternDescriptor(
        pattern=_STORE + r' store array "([^"]*)" should have (\d+) items?',
        kind=StepKind.ASSERTION,
        generate=store_array_should_have_length,
        params=("quoted_store", "store", "array", "count"),
        tags=("store", "verification", "array"),
        description="Verify the length of a store array",
        example='the "cart" store array "items" should have 2 items',
    )),
    ("then-store-array-should-contain", PatternDescriptor(
        pattern=_STORE + r' store array "([^"]*)" should contain "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=store_array_should_contain,
        params=("quoted_store", "store", "array", "item"),
        tags=("store", "verification", "array"),
        description="Verify a store array contains an item",
        example='the "cart" store array "items" should contain "Book"',
    )),
    ("then-store-getter-should-return", PatternDescriptor(
        pattern=_STORE + r' store getter "([^"]*)" should return "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=store_getter_should_return,
        params=("quoted_store", "store", "getter", "value"),
        tags=("store", "verification", "getters"),
        description="Verify a store getter's value",
        example='the "cart" store getter "itemCount" should return "2"',
    )),
    ("then-store-should-be-loading", PatternDescriptor(
        pattern=_STORE + r" store should be loading",
        kind=StepKind.ASSERTION,
        generate=store_should_be_loading,
        params=("quoted_store", "store"),
        tags=("store", "verification", "loading"),
        description="Verify a store is loading",
        example='the "catalog" store should be loading',
    )),
    ("then-store-should-not-be-loading", PatternDescriptor(
        pattern=_STORE + r" store should not be loading",
        kind=StepKind.ASSERTION,
        generate=store_should_not_be_loading,
        params=("quoted_store", "store"),
        tags=("store", "verification", "loading"),
        description="Verify a store finished loading",
        example='the "catalog" store should not be loading',
    )),
    ("then-store-should-have-error", PatternDescriptor(
        pattern=_STORE + r' store should have (?:an )?error(?: with message "([^"]*)")?',
        kind=StepKind.ASSERTION,
        generate=store_should_have_error,
        params=("quoted_store", "store", "message"),
        tags=("store", "verification", "error"),
        description="Verify a store holds an error",
        example='the "checkout" store should have an error with message "Payment declined"',
    )),
]


def register_steps(registry: PatternRegistry) -> None:
    registry.register_many(STEPS)
