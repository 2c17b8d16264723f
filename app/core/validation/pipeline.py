"""Declarative request validation.

A route declares an ordered list of :class:`Rule`. :func:`validate` evaluates
them against a :class:`RequestContext` and returns a :class:`ValidationResult`;
:func:`gate` either hands the context on or raises :class:`ValidationFailed`,
which the API layer renders as ``{"errors": [{"field", "message"}, ...]}``.

Rules that target the same field form a chain evaluated in declared order; a
failing rule with ``bail=True`` stops the rest of its chain. Chains for
different fields run concurrently. Outcomes are always reported in the order
their rules were declared, never in completion order.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence, Union

from app.utils.exceptions import CatalogException

logger = logging.getLogger(__name__)


NOT_FOUND = "not found"
SERVER_ERROR = "server error"
ALREADY_EXISTS = "already exists"
LOGIN_FAILED = "username or password incorrect"


class Location(str, Enum):
    BODY = "body"
    QUERY = "query"
    PATH = "path"


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 500,
}

# Worst first. BAD_REQUEST is the fallback.
_PRECEDENCE = (ErrorKind.SERVER_ERROR, ErrorKind.NOT_FOUND, ErrorKind.UNAUTHORIZED)


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    content: bytes


@dataclass
class RequestContext:
    """Everything a rule may look at, plus resources resolved along the way."""

    method: str = "GET"
    path: str = "/"
    body: dict[str, Any] = dc_field(default_factory=dict)
    query: dict[str, Any] = dc_field(default_factory=dict)
    path_params: dict[str, Any] = dc_field(default_factory=dict)
    files: dict[str, UploadedFile] = dc_field(default_factory=dict)
    user: Any = None
    session_factory: Any = None
    resources: dict[str, Any] = dc_field(default_factory=dict)

    @property
    def resource(self) -> Any:
        return self.resources.get("resource")

    @property
    def is_patch(self) -> bool:
        return self.method.upper() == "PATCH"

    def source(self, location: Location) -> dict[str, Any]:
        if location is Location.BODY:
            return self.body
        if location is Location.QUERY:
            return self.query
        return self.path_params

    def value(self, location: Location, name: str) -> Any:
        return self.source(location).get(name)


Check = Callable[[Any, RequestContext], Union[bool, None, Any, Awaitable[Any]]]
RunCondition = Callable[[RequestContext], bool]


class RuleFailed(Exception):
    """Raised by a check to fail with a message other than the rule's own."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.BAD_REQUEST):
        self.message = message
        self.kind = kind
        super().__init__(message)


class SkipOutcome(Exception):
    """Raised by a check when a related, more specific rule reports the problem."""


@dataclass(frozen=True)
class Rule:
    field: str
    location: Location
    check: Check
    message: str
    kind: ErrorKind = ErrorKind.BAD_REQUEST
    optional: bool = False
    run_if: Optional[RunCondition] = None
    bail: bool = False


@dataclass(frozen=True)
class Outcome:
    field: str
    message: str
    kind: ErrorKind = ErrorKind.BAD_REQUEST
    location: Location = Location.BODY
    skip: bool = False

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def classify(outcomes: Iterable[Outcome]) -> ErrorKind:
    kinds = {o.kind for o in outcomes if not o.skip}
    for kind in _PRECEDENCE:
        if kind in kinds:
            return kind
    return ErrorKind.BAD_REQUEST


@dataclass(frozen=True)
class ValidationResult:
    context: RequestContext
    outcomes: tuple[Outcome, ...] = ()

    @property
    def errors(self) -> list[Outcome]:
        return [o for o in self.outcomes if not o.skip]

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def kind(self) -> ErrorKind:
        return classify(self.outcomes)

    @property
    def status_code(self) -> int:
        return 200 if self.ok else self.kind.status_code


class ValidationFailed(CatalogException):
    def __init__(self, outcomes: Sequence[Outcome]):
        self.outcomes = [o for o in outcomes if not o.skip]
        kind = classify(self.outcomes)
        super().__init__("validation failed", status_code=kind.status_code)
        self.kind = kind

    def to_dict(self) -> dict:
        return {"errors": [o.to_dict() for o in self.outcomes]}


def is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    return False


async def evaluate_rule(rule: Rule, ctx: RequestContext) -> Optional[Outcome]:
    """Run one rule. Returns None when the rule passed or did not apply."""

    if rule.run_if is not None and not rule.run_if(ctx):
        return None

    value = ctx.value(rule.location, rule.field)
    if rule.optional and is_absent(value):
        return None

    try:
        passed = rule.check(value, ctx)
        if inspect.isawaitable(passed):
            passed = await passed
    except RuleFailed as exc:
        return Outcome(rule.field, exc.message, exc.kind, rule.location)
    except SkipOutcome:
        return Outcome(rule.field, "skip", ErrorKind.BAD_REQUEST, rule.location, skip=True)
    except Exception:
        logger.warning(
            "validation.rule_error field=%s location=%s path=%s",
            rule.field,
            rule.location.value,
            ctx.path,
            exc_info=True,
        )
        return Outcome(rule.field, SERVER_ERROR, ErrorKind.SERVER_ERROR, rule.location)

    if passed is False:
        return Outcome(rule.field, rule.message, rule.kind, rule.location)
    return None


async def _run_chain(chain: list[tuple[int, Rule]], ctx: RequestContext) -> list[tuple[int, Outcome]]:
    results: list[tuple[int, Outcome]] = []
    for index, rule in chain:
        outcome = await evaluate_rule(rule, ctx)
        if outcome is None:
            continue
        results.append((index, outcome))
        if rule.bail and not outcome.skip:
            break
    return results


def _chains(rules: Sequence[Rule]) -> list[list[tuple[int, Rule]]]:
    grouped: dict[tuple[Location, str], list[tuple[int, Rule]]] = {}
    for index, rule in enumerate(rules):
        grouped.setdefault((rule.location, rule.field), []).append((index, rule))
    return list(grouped.values())


async def validate(rules: Sequence[Rule], ctx: RequestContext) -> ValidationResult:
    if not rules:
        return ValidationResult(ctx)

    per_chain = await asyncio.gather(*(_run_chain(chain, ctx) for chain in _chains(rules)))
    collected = sorted(
        (item for chain_results in per_chain for item in chain_results),
        key=lambda item: item[0],
    )
    return ValidationResult(ctx, tuple(outcome for _, outcome in collected))


def gate(result: ValidationResult) -> RequestContext:
    if result.ok:
        return result.context
    raise ValidationFailed(result.outcomes)
