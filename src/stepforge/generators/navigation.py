"""Step patterns for routing, URLs, page titles and menus."""

from __future__ import annotations

from stepforge.generators.helpers import browser, first, page_path, quote
from stepforge.models import Captures, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry

_PAGE = r'(?:the )?(?:"([^"]*)"|([^"]*?))'


def _goto(path: str, options: GenerationOptions) -> str:
    if browser(options):
        return f"context.page.goto({quote(path)})"
    return f"context.router.push({quote(path)})"


def visit_url(captures: Captures, options: GenerationOptions) -> str:
    return _goto(captures[0] or "/", options)


def visit_home(captures: Captures, options: GenerationOptions) -> str:
    return _goto("/", options)


def visit_page_with_param(captures: Captures, options: GenerationOptions) -> str:
    base = page_path(first(captures[0], captures[1])).rstrip("/")
    return _goto(f"{base}/{captures[2] or ''}", options)


def visit_page_with_query(captures: Captures, options: GenerationOptions) -> str:
    query = (captures[2] or "").lstrip("?")
    return _goto(f"{page_path(first(captures[0], captures[1]))}?{query}", options)


def visit_page(captures: Captures, options: GenerationOptions) -> str:
    return _goto(page_path(first(captures[0], captures[1])), options)


def go_back(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return "context.page.go_back()"
    return "context.router.back()"


def refresh_page(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return "context.page.reload()"
    return "context.router.replace(context.router.current_path)"


def should_be_on_page(captures: Captures, options: GenerationOptions) -> str:
    path = page_path(first(captures[0], captures[1]))
    if browser(options):
        return f"expect(context.page).to_have_url(re.compile(re.escape({quote(path)}) + r\"(\\?.*)?$\"))"
    return f"assert context.router.current_path == {quote(path)}"


def should_be_at_url(captures: Captures, options: GenerationOptions) -> str:
    url = quote(captures[0] or "")
    if browser(options):
        return f"expect(context.page).to_have_url({url})"
    return f"assert context.router.current_url == {url}"


def url_should_contain(captures: Captures, options: GenerationOptions) -> str:
    target = "context.page.url" if browser(options) else "context.router.current_url"
    return f"assert {quote(captures[0] or '')} in {target}"


def url_should_not_contain(captures: Captures, options: GenerationOptions) -> str:
    target = "context.page.url" if browser(options) else "context.router.current_url"
    return f"assert {quote(captures[0] or '')} not in {target}"


def page_title_should_be(captures: Captures, options: GenerationOptions) -> str:
    title = quote(captures[0] or "")
    if browser(options):
        return f"expect(context.page).to_have_title({title})"
    return f"assert context.component.title() == {title}"


def open_menu(captures: Captures, options: GenerationOptions) -> str:
    menu = quote(first(captures[0], captures[1]))
    if browser(options):
        return f'context.page.get_by_role("button", name={menu}).click()'
    return f'context.component.find_by_text("button", {menu}).trigger("click")'


def click_menu_item(captures: Captures, options: GenerationOptions) -> str:
    item = quote(first(captures[0], captures[1]))
    if browser(options):
        return f'context.page.get_by_role("menuitem", name={item}).click()'
    return f"context.component.find_by_text('[role=\"menuitem\"]', {item}).trigger(\"click\")"


# Specific visit phrasings precede the generic "visit ... page" pattern,
# which would otherwise match them too.
STEPS: list[tuple[str, PatternDescriptor]] = [
    ("visit-url", PatternDescriptor(
        pattern=r'I (?:visit|go to|navigate to) (?:the )?URL "([^"]*)"',
        kind=StepKind.SETUP,
        generate=visit_url,
        params=("url",),
        tags=("navigation", "routing", "url"),
        description="Open an absolute or relative URL",
        example='I go to the URL "https://example.com/docs"',
    )),
    ("visit-home", PatternDescriptor(
        pattern=r"I (?:visit|go to|am on) (?:the )?(?:home|index|main) page",
        kind=StepKind.SETUP,
        generate=visit_home,
        tags=("navigation", "routing", "home"),
        description="Open the home page",
        example="I am on the home page",
    )),
    ("visit-page-with-param", PatternDescriptor(
        pattern=r"I (?:visit|go to) " + _PAGE + r' page with (?:id|parameter|param) "([^"]*)"',
        kind=StepKind.SETUP,
        generate=visit_page_with_param,
        params=("quoted_page", "page", "param"),
        tags=("navigation", "routing", "params"),
        description="Open a page with a route parameter",
        example='I visit the "product" page with id "42"',
    )),
    ("visit-page-with-query", PatternDescriptor(
        pattern=r"I (?:visit|go to) " + _PAGE + r' page with query "([^"]*)"',
        kind=StepKind.SETUP,
        generate=visit_page_with_query,
        params=("quoted_page", "page", "query"),
        tags=("navigation", "routing", "query"),
        description="Open a page with a query string",
        example='I go to the "search" page with query "q=shoes"',
    )),
    ("visit-page", PatternDescriptor(
        pattern=r"I (?:visit|go to|navigate to) " + _PAGE + r" page",
        kind=StepKind.SETUP,
        generate=visit_page,
        params=("quoted_page", "page"),
        tags=("navigation", "routing"),
        description="Open a page by name",
        example='I visit the "login" page',
    )),
    ("go-back", PatternDescriptor(
        pattern=r"I (?:go back|navigate back)",
        kind=StepKind.ACTION,
        generate=go_back,
        tags=("navigation", "history"),
        description="Go back in browser history",
        example="I go back",
    )),
    ("refresh-page", PatternDescriptor(
        pattern=r"I (?:refresh|reload) the page",
        kind=StepKind.ACTION,
        generate=refresh_page,
        tags=("navigation", "reload"),
        description="Reload the current page",
        example="I reload the page",
    )),
    ("should-be-on-page", PatternDescriptor(
        pattern=r"I should be on " + _PAGE + r" page",
        kind=StepKind.ASSERTION,
        generate=should_be_on_page,
        params=("quoted_page", "page"),
        tags=("navigation", "verification", "routing"),
        description="Verify the current route",
        example='I should be on the "dashboard" page',
        imports=("import re",),
    )),
    ("should-be-at-url", PatternDescriptor(
        pattern=r'I should be at (?:the )?URL "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_be_at_url,
        params=("url",),
        tags=("navigation", "verification", "url"),
        description="Verify the exact current URL",
        example='I should be at the URL "https://example.com/account"',
    )),
    ("url-should-contain", PatternDescriptor(
        pattern=r'(?:the )?URL should contain "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=url_should_contain,
        params=("fragment",),
        tags=("navigation", "verification", "url"),
        description="Verify the URL contains a fragment",
        example='the URL should contain "/checkout"',
    )),
    ("url-should-not-contain", PatternDescriptor(
        pattern=r'(?:the )?URL should not contain "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=url_should_not_contain,
        params=("fragment",),
        tags=("navigation", "verification", "url"),
        description="Verify the URL does not contain a fragment",
        example='the URL should not contain "/admin"',
    )),
    ("page-title-should-be", PatternDescriptor(
        pattern=r'(?:the )?page title should be "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=page_title_should_be,
        params=("title",),
        tags=("navigation", "verification", "seo"),
        description="Verify the document title",
        example='the page title should be "Checkout | Shop"',
    )),
    ("open-menu", PatternDescriptor(
        pattern=r"I open " + _PAGE + r" menu",
        kind=StepKind.ACTION,
        generate=open_menu,
        params=("quoted_menu", "menu"),
        tags=("navigation", "menu"),
        description="Open a menu by its trigger button",
        example='I open the "Account" menu',
    )),
    ("click-menu-item", PatternDescriptor(
        pattern=r"I click " + _PAGE + r" menu item",
        kind=StepKind.ACTION,
        generate=click_menu_item,
        params=("quoted_item", "item"),
        tags=("navigation", "menu", "click"),
        description="Click an item inside an open menu",
        example='I click the "Settings" menu item',
    )),
]


def register_steps(registry: PatternRegistry) -> None:
    registry.register_many(STEPS)
