"""Step patterns for API requests and response assertions."""

from __future__ import annotations

from stepforge.generators.helpers import browser, json_path, quote
from stepforge.models import Captures, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry


def _ensure_headers() -> str:
    return 'context.request_headers = getattr(context, "request_headers", {})'


def set_api_base_url(captures: Captures, options: GenerationOptions) -> str:
    return f"context.api_base_url = {quote((captures[0] or '').rstrip('/'))}"


def set_request_header(captures: Captures, options: GenerationOptions) -> str:
    return "\n".join([
        _ensure_headers(),
        f"context.request_headers[{quote(captures[0] or '')}] = {quote(captures[1] or '')}",
    ])


def set_auth_token(captures: Captures, options: GenerationOptions) -> str:
    return "\n".join([
        _ensure_headers(),
        f'context.request_headers["Authorization"] = {quote("Bearer " + (captures[0] or ""))}',
    ])


def set_request_body(captures: Captures, options: GenerationOptions) -> str:
    return f"context.request_body = json.loads({quote(captures[0] or 'null')})"


def _request(method: str, path: str, body: str, options: GenerationOptions) -> str:
    headers = 'getattr(context, "request_headers", {})'
    if browser(options):
        return "\n".join([
            f'url = getattr(context, "api_base_url", "") + {quote(path)}',
            "context.response = context.page.request.fetch(",
            "    url,",
            f"    method={quote(method)},",
            f"    headers={headers},",
            f"    data={body},",
            ")",
        ])
    return "\n".join([
        "context.response = context.client.request(",
        f"    {quote(method)},",
        f"    {quote(path)},",
        f"    headers={headers},",
        f"    json={body},",
        ")",
    ])


def send_request_with_body(captures: Captures, options: GenerationOptions) -> str:
    body = f"json.loads({quote(captures[2] or 'null')})"
    return _request((captures[0] or "POST").upper(), captures[1] or "", body, options)


def send_request(captures: Captures, options: GenerationOptions) -> str:
    body = 'getattr(context, "request_body", None)'
    return _request((captures[0] or "GET").upper(), captures[1] or "", body, options)


def response_status_should_be(captures: Captures, options: GenerationOptions) -> str:
    attribute = "status" if browser(options) else "status_code"
    return f"assert context.response.{attribute} == {int(captures[0] or 0)}"


def _text(options: GenerationOptions) -> str:
    return "context.response.text()" if browser(options) else "context.response.text"


def response_should_contain(captures: Captures, options: GenerationOptions) -> str:
    return f"assert {quote(captures[0] or '')} in {_text(options)}"


def response_should_not_contain(captures: Captures, options: GenerationOptions) -> str:
    return f"assert {quote(captures[0] or '')} not in {_text(options)}"


def response_should_be_json(captures: Captures, options: GenerationOptions) -> str:
    return f"context.response_json = json.loads({_text(options)})"


def response_json_property_should_be(captures: Captures, options: GenerationOptions) -> str:
    actual = json_path("context.response.json()", captures[0] or "")
    return f"assert {actual} == {quote(captures[1] or '')}"


def response_json_property_should_be_number(captures: Captures, options: GenerationOptions) -> str:
    actual = json_path("context.response.json()", captures[0] or "")
    return f"assert {actual} == {int(captures[1] or 0)}"


def response_json_array_should_have_length(captures: Captures, options: GenerationOptions) -> str:
    return f"assert len(context.response.json()) == {int(captures[0] or 0)}"


def response_header_should_be(captures: Captures, options: GenerationOptions) -> str:
    name = captures[0] or ""
    if browser(options):
        # Playwright exposes header names lower-cased
        name = name.lower()
    return f"assert context.response.headers[{quote(name)}] == {quote(captures[1] or '')}"


def mock_api_error(captures: Captures, options: GenerationOptions) -> str:
    path = captures[0] or ""
    status = int(captures[1] or 500)
    if browser(options):
        return (
            f"context.page.route({quote('**' + path)}, "
            f"lambda route: route.fulfill(status={status}))"
        )
    return "\n".join([
        'context.mocked_responses = getattr(context, "mocked_responses", {})',
        f"context.mocked_responses[{quote(path)}] = {status}",
    ])


STEPS: list[tuple[str, PatternDescriptor]] = [
    ("set-api-base-url", PatternDescriptor(
        pattern=r'I set (?:the )?API base URL to "([^"]*)"',
        kind=StepKind.SETUP,
        generate=set_api_base_url,
        params=("url",),
        tags=("api", "setup", "config"),
        description="Set the base URL API requests are sent to",
        example='I set the API base URL to "https://api.example.com"',
    )),
    ("set-request-header", PatternDescriptor(
        pattern=r'I set (?:the )?(?:request )?header "([^"]*)" to "([^"]*)"',
        kind=StepKind.SETUP,
        generate=set_request_header,
        params=("name", "value"),
        tags=("api", "setup", "headers"),
        description="Set a request header",
        example='I set the header "Accept" to "application/json"',
    )),
    ("set-auth-token", PatternDescriptor(
        pattern=r'I set (?:the )?(?:auth|authorization) token to "([^"]*)"',
        kind=StepKind.SETUP,
        generate=set_auth_token,
        params=("token",),
        tags=("api", "setup", "auth"),
        description="Send a bearer token with subsequent requests",
        example='I set the auth token to "abc123"',
    )),
    ("set-request-body", PatternDescriptor(
        pattern=r"I set (?:the )?request body to '([^']*)'",
        kind=StepKind.SETUP,
        generate=set_request_body,
        params=("json",),
        tags=("api", "setup", "body"),
        description="Set a JSON request body",
        example="""I set the request body to '{"name": "Ada"}'""",
        imports=("import json",),
    )),
    ("send-request-with-body", PatternDescriptor(
        pattern=r"""I (?:make|send) an? (POST|PUT|PATCH) request to "([^"]*)" with body '([^']*)'""",
        kind=StepKind.ACTION,
        generate=send_request_with_body,
        params=("method", "path", "json"),
        tags=("api", "request", "body"),
        description="Send a request with an inline JSON body",
        example="""I send a POST request to "/api/users" with body '{"name": "Ada"}'""",
        imports=("import json",),
    )),
    ("send-request", PatternDescriptor(
        pattern=r'I (?:make|send) an? (GET|POST|PUT|PATCH|DELETE) request to "([^"]*)"',
        kind=StepKind.ACTION,
        generate=send_request,
        params=("method", "path"),
        tags=("api", "request", "http"),
        description="Send an HTTP request",
        example='I send a GET request to "/api/users"',
    )),
    ("response-status-should-be", PatternDescriptor(
        pattern=r"(?:the )?response status should be (\d+)",
        kind=StepKind.ASSERTION,
        generate=response_status_should_be,
        params=("status",),
        tags=("api", "verification", "status"),
        description="Verify the response status code",
        example="the response status should be 201",
    )),
    ("response-should-contain", PatternDescriptor(
        pattern=r'(?:the )?response should contain "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=response_should_contain,
        params=("text",),
        tags=("api", "verification", "body"),
        description="Verify the response body contains text",
        example='the response should contain "Ada"',
    )),
    ("response-should-not-contain", PatternDescriptor(
        pattern=r'(?:the )?response should not contain "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=response_should_not_contain,
        params=("text",),
        tags=("api", "verification", "body"),
        description="Verify the response body does not contain text",
        example='the response should not contain "password"',
    )),
    ("response-should-be-json", PatternDescriptor(
        pattern=r"(?:the )?response should be (?:valid )?JSON",
        kind=StepKind.ASSERTION,
        generate=response_should_be_json,
        tags=("api", "verification", "json"),
        description="Verify the response body parses as JSON",
        example="the response should be valid JSON",
        imports=("import json",),
    )),
    ("response-json-property-should-be", PatternDescriptor(
        pattern=r'(?:the )?response JSON property "([^"]*)" should be "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=response_json_property_should_be,
        params=("property", "value"),
        tags=("api", "verification", "json"),
        description="Verify a JSON property equals a string",
        example='the response JSON property "user.name" should be "Ada"',
    )),
    ("response-json-property-should-be-number", PatternDescriptor(
        pattern=r'(?:the )?response JSON property "([^"]*)" should be (\d+)',
        kind=StepKind.ASSERTION,
        generate=response_json_property_should_be_number,
        params=("property", "value"),
        tags=("api", "verification", "json"),
        description="Verify a JSON property equals a number",
        example='the response JSON property "id" should be 42',
    )),
    ("response-json-array-should-have-length", PatternDescriptor(
        pattern=r"(?:the )?response JSON array should have (\d+) items?",
        kind=StepKind.ASSERTION,
        generate=response_json_array_should_have_length,
        params=("count",),
        tags=("api", "verification", "json"),
        description="Verify the length of a JSON array response",
        example="the response JSON array should have 3 items",
    )),
    ("response-header-should-be", PatternDescriptor(
        pattern=r'(?:the )?response header "([^"]*)" should be "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=response_header_should_be,
        params=("name", "value"),
        tags=("api", "verification", "headers"),
        description="Verify a response header value",
        example='the response header "Content-Type" should be "application/json"',
    )),
    ("mock-api-error", PatternDescriptor(
        pattern=r'I mock (?:the )?API error for "([^"]*)" with status (\d+)',
        kind=StepKind.SETUP,
        generate=mock_api_error,
        params=("path", "status"),
        tags=("api", "mock", "error"),
        description="Make an endpoint fail with a status code",
        example='I mock the API error for "/api/users" with status 500',
    )),
]


def register_steps(registry: PatternRegistry) -> None:
    registry.register_many(STEPS)
