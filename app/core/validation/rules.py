"""Reusable rule factories and value coercions for the validation pipeline."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

from app.core.validation.pipeline import (
    ALREADY_EXISTS,
    LOGIN_FAILED,
    NOT_FOUND,
    SERVER_ERROR,
    ErrorKind,
    Location,
    RequestContext,
    Rule,
    RuleFailed,
    RunCondition,
    SkipOutcome,
    is_absent,
)

logger = logging.getLogger(__name__)


Fetch = Callable[[Any, RequestContext], Awaitable[Any]]

# Largest value a 64-bit SQL INTEGER (LIMIT/OFFSET bind) can hold.
MAX_SQL_INT = 2**63 - 1

_INT_RE = re.compile(r"^[+-]?\d+$")
_DATE_RE = re.compile(r"^\d{4}[-/]\d{2}[-/]\d{2}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")

_TRUE_STRINGS = frozenset({"true", "1"})
_FALSE_STRINGS = frozenset({"false", "0"})

IMAGE_MIMETYPES = ("image/jpeg", "image/png", "image/gif")


# --- Coercions ---


def to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def to_bool(value: Any, *, strict: bool = False) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if not strict and isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true" or (not strict and lowered in _TRUE_STRINGS):
            return True
        if lowered == "false" or (not strict and lowered in _FALSE_STRINGS):
            return False
    return None


def to_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip().replace("/", "-"))
    except ValueError:
        return None


# --- Predicates ---


def is_int(*, min_value: int | None = None, max_value: int | None = None):
    def check(value: Any, _ctx: RequestContext) -> bool:
        number = to_int(value)
        if number is None:
            return False
        if min_value is not None and number < min_value:
            return False
        if max_value is not None and number > max_value:
            return False
        return True

    return check


def has_length(*, min_length: int = 0, max_length: int | None = None):
    def check(value: Any, _ctx: RequestContext) -> bool:
        if value is None or isinstance(value, (dict, list, bool)):
            return False
        text = value if isinstance(value, str) else str(value)
        if len(text) < min_length:
            return False
        if max_length is not None and len(text) > max_length:
            return False
        return True

    return check


def is_string(*, min_length: int = 0, max_length: int | None = None):
    def check(value: Any, ctx: RequestContext) -> bool:
        if not isinstance(value, str):
            return False
        return has_length(min_length=min_length, max_length=max_length)(value, ctx)

    return check


def is_email(value: Any, _ctx: RequestContext) -> bool:
    return isinstance(value, str) and len(value) <= 256 and _EMAIL_RE.fullmatch(value) is not None


def is_date(value: Any, _ctx: RequestContext) -> bool:
    return to_date(value) is not None


def is_boolean(*, strict: bool = False):
    def check(value: Any, _ctx: RequestContext) -> bool:
        return to_bool(value, strict=strict) is not None

    return check


def is_present(value: Any, _ctx: RequestContext) -> bool:
    return value is not None


def is_in(allowed: Sequence[Any]):
    allowed_as_text = {str(v) for v in allowed}

    def check(value: Any, _ctx: RequestContext) -> bool:
        if value is None or isinstance(value, (bool, dict, list)):
            return False
        return str(value) in allowed_as_text

    return check


# --- Run conditions ---


def optional_on_patch(name: str, location: Location = Location.BODY) -> RunCondition:
    """Required when creating, skipped on PATCH when the field was left out."""

    def condition(ctx: RequestContext) -> bool:
        return not (ctx.is_patch and is_absent(ctx.value(location, name)))

    return condition


# --- Rule factories ---


def positive_id(name: str = "id", *, location: Location = Location.PATH) -> Rule:
    return Rule(
        field=name,
        location=location,
        check=is_int(min_value=1),
        message=f"{name} must be an integer larger than 0",
        bail=True,
    )


def paging_rules() -> list[Rule]:
    return [
        Rule(
            field="offset",
            location=Location.QUERY,
            check=is_int(min_value=0, max_value=MAX_SQL_INT),
            message='query parameter "offset" must be an int, 0 or larger',
            optional=True,
        ),
        Rule(
            field="limit",
            location=Location.QUERY,
            check=is_int(min_value=1, max_value=MAX_SQL_INT),
            message='query parameter "limit" must be an int, larger than 0',
            optional=True,
        ),
    ]


def resource_exists(
    fetch: Fetch,
    *,
    field: str = "id",
    location: Location = Location.PATH,
    attach_as: str = "resource",
    run_if: RunCondition | None = None,
    bail: bool = False,
) -> Rule:
    """Resolve ``field`` through ``fetch``; attach the result or fail with "not found"."""

    async def check(value: Any, ctx: RequestContext) -> bool:
        try:
            resource = await fetch(value, ctx)
        except Exception:
            logger.warning("validation.lookup_failed field=%s value=%r", field, value, exc_info=True)
            raise RuleFailed(SERVER_ERROR, ErrorKind.SERVER_ERROR)

        if resource is None:
            raise RuleFailed(NOT_FOUND, ErrorKind.NOT_FOUND)

        ctx.resources[attach_as] = resource
        return True

    return Rule(
        field=field,
        location=location,
        check=check,
        message=NOT_FOUND,
        kind=ErrorKind.NOT_FOUND,
        run_if=run_if,
        bail=bail,
    )


def resource_not_exists(
    fetch: Fetch,
    *,
    field: str = "id",
    location: Location = Location.PATH,
    message: str = ALREADY_EXISTS,
    optional: bool = False,
    run_if: RunCondition | None = None,
) -> Rule:
    """Inverse of :func:`resource_exists`: passes only when ``fetch`` finds nothing."""

    async def check(value: Any, ctx: RequestContext) -> bool:
        try:
            resource = await fetch(value, ctx)
        except Exception:
            logger.warning("validation.lookup_failed field=%s value=%r", field, value, exc_info=True)
            raise RuleFailed(SERVER_ERROR, ErrorKind.SERVER_ERROR)
        return resource is None

    return Rule(
        field=field,
        location=location,
        check=check,
        message=message,
        optional=optional,
        run_if=run_if,
    )


def at_least_one_of(fields: Iterable[str], *, files: Iterable[str] = ()) -> Rule:
    names = list(fields)
    file_names = list(files)
    listed = ", ".join(names + file_names)

    def check(_value: Any, ctx: RequestContext) -> bool:
        if any(not is_absent(ctx.body.get(name)) for name in names):
            return True
        return any(name in ctx.files for name in file_names)

    return Rule(
        field="body",
        location=Location.BODY,
        check=check,
        message=f"require at least one value of: {listed}",
    )


def image_rule(name: str = "image") -> Rule:
    """Multipart image: required on create, optional on PATCH, mimetype checked."""

    def check(_value: Any, ctx: RequestContext) -> bool:
        upload = ctx.files.get(name)
        if upload is None:
            if ctx.is_patch:
                return True
            raise RuleFailed(f"{name} is required")

        mimetype = (upload.content_type or "").lower()
        if mimetype not in IMAGE_MIMETYPES:
            raise RuleFailed(
                f"Mimetype {upload.content_type} is not legal. "
                f"Only {', '.join(IMAGE_MIMETYPES)} are accepted"
            )
        return True

    return Rule(field=name, location=Location.BODY, check=check, message=f"{name} is required")


def admin_flag_rules(name: str = "admin") -> list[Rule]:
    """``admin`` must be a boolean and an admin may not change their own flag."""

    def not_self(_value: Any, ctx: RequestContext) -> bool:
        target = to_int(ctx.path_params.get("id"))
        current = getattr(ctx.user, "id", None)
        return target is not None and target != current

    return [
        Rule(field=name, location=Location.BODY, check=is_present, message=f"{name} is required"),
        Rule(
            field=name,
            location=Location.BODY,
            check=is_boolean(strict=True),
            message=f"{name} must be a boolean",
            bail=True,
        ),
        Rule(field=name, location=Location.BODY, check=not_self, message="admin cannot change self"),
    ]


def credentials_rule(
    verify: Callable[[str, str, RequestContext], Awaitable[bool]],
    *,
    username_field: str = "username",
    password_field: str = "password",
) -> Rule:
    """Combined username/password check.

    Missing halves are reported by the plain shape rules, so this rule emits a
    skip marker instead of a second error for them.
    """

    async def check(username: Any, ctx: RequestContext) -> bool:
        password = ctx.body.get(password_field)
        if not username or not password:
            raise SkipOutcome()

        valid = False
        try:
            valid = await verify(str(username), str(password), ctx)
        except Exception:
            logger.info("auth.login_attempt_failed username=%s", username, exc_info=True)

        if not valid:
            logger.info("auth.login_invalid username=%s", username)
            raise RuleFailed(LOGIN_FAILED, ErrorKind.UNAUTHORIZED)
        return True

    return Rule(
        field=username_field,
        location=Location.BODY,
        check=check,
        message=LOGIN_FAILED,
        kind=ErrorKind.UNAUTHORIZED,
    )


def path_ints_valid(*names: str) -> RunCondition:
    """Run only when every named path parameter is a positive integer."""

    def condition(ctx: RequestContext) -> bool:
        for name in names:
            number = to_int(ctx.path_params.get(name))
            if number is None or number < 1:
                return False
        return True

    return condition

