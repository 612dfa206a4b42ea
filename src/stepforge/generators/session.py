"""Step patterns for users, authentication, roles and sessions."""

from __future__ import annotations

from stepforge.generators.helpers import browser, quote
from stepforge.models import Captures, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry

DEFAULT_EMAIL = "user@example.com"
DEFAULT_PASSWORD = "password123"


def _ui_login(email: str, password: str) -> list[str]:
    return [
        'context.page.goto("/login")',
        f'context.page.get_by_label("Email").fill({quote(email)})',
        f'context.page.get_by_label("Password").fill({quote(password)})',
        'context.page.get_by_role("button", name="Log in").click()',
    ]


def given_user_exists(captures: Captures, options: GenerationOptions) -> str:
    email = quote(captures[0] or DEFAULT_EMAIL)
    password = quote(captures[1] or DEFAULT_PASSWORD)
    if browser(options):
        return "\n".join([
            "context.page.request.post(",
            '    "/api/test/users",',
            f'    data={{"email": {email}, "password": {password}}},',
            ")",
        ])
    return f"context.session.create_user(email={email}, password={password})"


def given_user_with_role(captures: Captures, options: GenerationOptions) -> str:
    role = quote(captures[0] or "")
    email = quote(captures[1] or DEFAULT_EMAIL)
    if browser(options):
        return "\n".join([
            "context.page.request.post(",
            '    "/api/test/users",',
            f'    data={{"email": {email}, "password": {quote(DEFAULT_PASSWORD)}, "roles": [{role}]}},',
            ")",
        ])
    return f"context.session.create_user(email={email}, password={quote(DEFAULT_PASSWORD)}, roles=[{role}])"


def user_is_logged_in(captures: Captures, options: GenerationOptions) -> str:
    email = captures[0] or DEFAULT_EMAIL
    if browser(options):
        return "\n".join(_ui_login(email, DEFAULT_PASSWORD))
    return f"context.session.login({quote(email)})"


def user_is_logged_out(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return "context.page.context.clear_cookies()"
    return "context.session.logout()"


def login_with_credentials(captures: Captures, options: GenerationOptions) -> str:
    email = captures[0] or DEFAULT_EMAIL
    password = captures[1] or ""
    if browser(options):
        return "\n".join(_ui_login(email, password))
    return f"context.session.login({quote(email)}, password={quote(password)})"


def login_with_invalid_credentials(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return "\n".join(_ui_login("invalid@example.com", "wrong-password"))
    return 'context.session.login("invalid@example.com", password="wrong-password")'


def login_as_user(captures: Captures, options: GenerationOptions) -> str:
    return user_is_logged_in(captures, options)


def logout(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return 'context.page.get_by_role("button", name="Log out").click()'
    return "context.session.logout()"


def request_password_reset(captures: Captures, options: GenerationOptions) -> str:
    email = quote(captures[0] or DEFAULT_EMAIL)
    if browser(options):
        return f'context.page.request.post("/api/auth/password-reset", data={{"email": {email}}})'
    return f"context.session.request_password_reset({email})"


def should_be_logged_in(captures: Captures, options: GenerationOptions) -> str:
    lines: list[str] = []
    if browser(options):
        lines.append('expect(context.page.get_by_role("button", name="Log out")).to_be_visible()')
        if captures[0]:
            lines.append(f"expect(context.page.get_by_text({quote(captures[0])})).to_be_visible()")
    else:
        lines.append("assert context.session.is_authenticated")
        if captures[0]:
            lines.append(f'assert context.session.user["email"] == {quote(captures[0])}')
    return "\n".join(lines)


def should_be_logged_out(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return 'expect(context.page.get_by_role("button", name="Log in")).to_be_visible()'
    return "assert not context.session.is_authenticated"


def should_see_login_error(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        alert = 'context.page.get_by_role("alert")'
        if captures[0]:
            return f"expect({alert}).to_contain_text({quote(captures[0])})"
        return f"expect({alert}).to_be_visible()"
    if captures[0]:
        return f"assert context.session.last_error == {quote(captures[0])}"
    return "assert context.session.last_error"


def should_be_redirected_to_login(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return 'expect(context.page).to_have_url(re.compile(r"/login(\\?.*)?$"))'
    return 'assert context.router.current_path == "/login"'


def _current_user(options: GenerationOptions) -> str:
    if browser(options):
        return 'context.page.request.get("/api/auth/me").json()'
    return "context.session.user"


def should_have_role(captures: Captures, options: GenerationOptions) -> str:
    return f'assert {quote(captures[0] or "")} in {_current_user(options)}["roles"]'


def should_have_permission(captures: Captures, options: GenerationOptions) -> str:
    return f'assert {quote(captures[0] or "")} in {_current_user(options)}["permissions"]'


def should_not_have_permission(captures: Captures, options: GenerationOptions) -> str:
    return f'assert {quote(captures[0] or "")} not in {_current_user(options)}["permissions"]'


def session_should_expire(captures: Captures, options: GenerationOptions) -> str:
    if browser(options):
        return "\n".join([
            "cookies = context.page.context.cookies()",
            'assert not [c for c in cookies if c["name"] == "session"]',
        ])
    return "assert context.session.is_expired"


STEPS: list[tuple[str, PatternDescriptor]] = [
    ("given-user-exists", PatternDescriptor(
        pattern=r'an? user (?:exists )?with (?:email|username) "([^"]*)"(?: and password "([^"]*)")?',
        kind=StepKind.SETUP,
        generate=given_user_exists,
        params=("email", "password"),
        tags=("auth", "user", "setup"),
        description="Create a user account",
        example='a user exists with email "a@b.com"',
    )),
    ("given-user-with-role", PatternDescriptor(
        pattern=r'an? user (?:exists )?with role "([^"]*)"(?: and email "([^"]*)")?',
        kind=StepKind.SETUP,
        generate=given_user_with_role,
        params=("role", "email"),
        tags=("auth", "user", "roles"),
        description="Create a user with a role",
        example='a user with role "admin" and email "root@example.com"',
    )),
    ("user-is-logged-in", PatternDescriptor(
        pattern=r'(?:the )?user is logged in(?: as "([^"]*)")?',
        kind=StepKind.SETUP,
        generate=user_is_logged_in,
        params=("email",),
        tags=("auth", "session", "setup"),
        description="Start from an authenticated session",
        example='the user is logged in as "alice@example.com"',
    )),
    ("user-is-logged-out", PatternDescriptor(
        pattern=r"(?:the )?user is (?:logged out|not logged in|anonymous)",
        kind=StepKind.SETUP,
        generate=user_is_logged_out,
        tags=("auth", "session", "setup"),
        description="Start from an anonymous session",
        example="the user is not logged in",
    )),
    ("login-with-credentials", PatternDescriptor(
        pattern=r'I (?:log in|login|sign in) with (?:email|username) "([^"]*)" and password "([^"]*)"',
        kind=StepKind.ACTION,
        generate=login_with_credentials,
        params=("email", "password"),
        tags=("auth", "login"),
        description="Log in with explicit credentials",
        example='I log in with email "alice@example.com" and password "s3cret"',
    )),
    ("login-with-invalid-credentials", PatternDescriptor(
        pattern=r"I (?:try to |attempt to )?(?:log in|login|sign in) with invalid credentials",
        kind=StepKind.ACTION,
        generate=login_with_invalid_credentials,
        tags=("auth", "login", "error"),
        description="Attempt a login that must fail",
        example="I try to log in with invalid credentials",
    )),
    ("login-as-user", PatternDescriptor(
        pattern=r'I (?:log in|login|sign in) as "([^"]*)"',
        kind=StepKind.ACTION,
        generate=login_as_user,
        params=("email",),
        tags=("auth", "login"),
        description="Log in as a known user",
        example='I sign in as "admin@example.com"',
    )),
    ("logout", PatternDescriptor(
        pattern=r"I (?:log out|logout|sign out)\b",
        kind=StepKind.ACTION,
        generate=logout,
        tags=("auth", "logout"),
        description="Log out of the current session",
        example="I log out",
    )),
    ("request-password-reset", PatternDescriptor(
        pattern=r'I request (?:a )?password reset for "([^"]*)"',
        kind=StepKind.ACTION,
        generate=request_password_reset,
        params=("email",),
        tags=("auth", "password"),
        description="Request a password reset email",
        example='I request a password reset for "alice@example.com"',
    )),
    ("should-be-logged-in", PatternDescriptor(
        pattern=r'I should be logged in(?: as "([^"]*)")?',
        kind=StepKind.ASSERTION,
        generate=should_be_logged_in,
        params=("email",),
        tags=("auth", "verification", "session"),
        description="Verify the session is authenticated",
        example="I should be logged in",
    )),
    ("should-be-logged-out", PatternDescriptor(
        pattern=r"I should be logged out",
        kind=StepKind.ASSERTION,
        generate=should_be_logged_out,
        tags=("auth", "verification", "session"),
        description="Verify the session is anonymous",
        example="I should be logged out",
    )),
    ("should-see-login-error", PatternDescriptor(
        pattern=r'I should see (?:an? |the )?(?:login |authentication )?error(?: message)?(?: saying "([^"]*)")?',
        kind=StepKind.ASSERTION,
        generate=should_see_login_error,
        params=("message",),
        tags=("auth", "verification", "error"),
        description="Verify a login error is shown",
        example='I should see a login error saying "Invalid password"',
    )),
    ("should-be-redirected-to-login", PatternDescriptor(
        pattern=r"I should be redirected to (?:the )?login page",
        kind=StepKind.ASSERTION,
        generate=should_be_redirected_to_login,
        tags=("auth", "verification", "navigation"),
        description="Verify an anonymous user is sent to the login page",
        example="I should be redirected to the login page",
        imports=("import re",),
    )),
    ("should-have-role", PatternDescriptor(
        pattern=r'(?:the )?user should have (?:the )?role "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_have_role,
        params=("role",),
        tags=("auth", "verification", "roles"),
        description="Verify the current user has a role",
        example='the user should have role "admin"',
    )),
    ("should-have-permission", PatternDescriptor(
        pattern=r'(?:the )?user should have permission "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_have_permission,
        params=("permission",),
        tags=("auth", "verification", "permissions"),
        description="Verify the current user has a permission",
        example='the user should have permission "orders:write"',
    )),
    ("should-not-have-permission", PatternDescriptor(
        pattern=r'(?:the )?user should not have permission "([^"]*)"',
        kind=StepKind.ASSERTION,
        generate=should_not_have_permission,
        params=("permission",),
        tags=("auth", "verification", "permissions"),
        description="Verify the current user lacks a permission",
        example='the user should not have permission "billing:admin"',
    )),
    ("session-should-expire", PatternDescriptor(
        pattern=r"(?:the )?(?:user )?session should (?:expire|be expired)",
        kind=StepKind.ASSERTION,
        generate=session_should_expire,
        tags=("auth", "verification", "session"),
        description="Verify the session has expired",
        example="the session should be expired",
    )),
]


def register_steps(registry: PatternRegistry) -> None:
    registry.register_many(STEPS)
