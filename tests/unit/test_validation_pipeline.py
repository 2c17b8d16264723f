import asyncio

import pytest

from app.core.validation.pipeline import (
    ErrorKind,
    Location,
    Outcome,
    RequestContext,
    Rule,
    RuleFailed,
    SkipOutcome,
    ValidationFailed,
    classify,
    gate,
    validate,
)
from app.core.validation.rules import resource_exists, resource_not_exists


def _passes(value, ctx):
    return True


def _fails(value, ctx):
    return False


@pytest.mark.asyncio
async def test_all_rules_passing_forwards_the_context_once():
    ctx = RequestContext(body={"name": "x"}, query={"limit": "3"})
    rules = [
        Rule("name", Location.BODY, _passes, "name bad"),
        Rule("limit", Location.QUERY, _passes, "limit bad"),
    ]

    result = await validate(rules, ctx)

    assert result.ok
    assert result.errors == []
    assert result.status_code == 200
    assert gate(result) is ctx


@pytest.mark.asyncio
async def test_outcomes_follow_declared_order_not_completion_order():
    async def slow_fail(value, ctx):
        await asyncio.sleep(0.05)
        return False

    async def fast_fail(value, ctx):
        return False

    rules = [
        Rule("first", Location.BODY, slow_fail, "first failed"),
        Rule("second", Location.BODY, fast_fail, "second failed"),
    ]

    result = await validate(rules, RequestContext())

    assert [o.message for o in result.errors] == ["first failed", "second failed"]


@pytest.mark.asyncio
async def test_rules_for_different_fields_run_concurrently():
    started: list[str] = []
    both_started = asyncio.Event()

    def make_check(name):
        async def check(value, ctx):
            started.append(name)
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return True

        return check

    rules = [
        Rule("a", Location.BODY, make_check("a"), "a"),
        Rule("b", Location.BODY, make_check("b"), "b"),
    ]

    result = await validate(rules, RequestContext())

    assert result.ok
    assert sorted(started) == ["a", "b"]


@pytest.mark.asyncio
async def test_run_condition_false_never_invokes_predicate():
    calls: list[object] = []

    def exploding(value, ctx):
        calls.append(value)
        raise AssertionError("must not be called")

    rules = [Rule("name", Location.BODY, exploding, "bad", run_if=lambda ctx: False)]

    result = await validate(rules, RequestContext(body={"name": "x"}))

    assert result.ok
    assert calls == []


@pytest.mark.asyncio
async def test_optional_rule_with_absent_field_never_invokes_predicate():
    calls: list[object] = []

    def exploding(value, ctx):
        calls.append(value)
        raise AssertionError("must not be called")

    rules = [
        Rule("missing", Location.BODY, exploding, "bad", optional=True),
        Rule("empty", Location.QUERY, exploding, "bad", optional=True),
    ]

    result = await validate(rules, RequestContext(query={"empty": ""}))

    assert result.ok
    assert calls == []


@pytest.mark.asyncio
async def test_message_is_attached_verbatim():
    rules = [Rule("name", Location.BODY, _fails, "name is required, max 128 characters")]

    result = await validate(rules, RequestContext())

    assert [o.to_dict() for o in result.errors] == [
        {"field": "name", "message": "name is required, max 128 characters"}
    ]
    assert result.status_code == 400


@pytest.mark.asyncio
async def test_resource_exists_attaches_resource():
    async def fetch(value, ctx):
        return {"id": int(value), "name": "Lost"}

    ctx = RequestContext(path_params={"id": "4"})
    result = await validate([resource_exists(fetch)], ctx)

    assert result.ok
    assert gate(result).resource == {"id": 4, "name": "Lost"}


@pytest.mark.asyncio
async def test_resource_exists_not_found():
    async def fetch(value, ctx):
        return None

    ctx = RequestContext(path_params={"id": "4"})
    result = await validate([resource_exists(fetch)], ctx)

    assert [o.message for o in result.errors] == ["not found"]
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.status_code == 404
    assert ctx.resource is None


@pytest.mark.asyncio
async def test_resource_lookup_failure_is_server_error_without_leaking():
    async def fetch(value, ctx):
        raise RuntimeError("connection refused: password=hunter2")

    result = await validate([resource_exists(fetch)], RequestContext(path_params={"id": "1"}))

    with pytest.raises(ValidationFailed) as exc_info:
        gate(result)

    exc = exc_info.value
    assert exc.status_code == 500
    assert exc.to_dict() == {"errors": [{"field": "id", "message": "server error"}]}
    assert "hunter2" not in str(exc.to_dict())


@pytest.mark.asyncio
async def test_resource_not_exists_rejects_existing():
    async def fetch(value, ctx):
        return object()

    result = await validate([resource_not_exists(fetch)], RequestContext(path_params={"id": "1"}))

    assert [o.message for o in result.errors] == ["already exists"]
    assert result.status_code == 400


@pytest.mark.asyncio
async def test_resource_not_exists_passes_when_missing():
    async def fetch(value, ctx):
        return None

    result = await validate([resource_not_exists(fetch)], RequestContext(path_params={"id": "1"}))

    assert result.ok


@pytest.mark.asyncio
async def test_unexpected_predicate_exception_is_server_error():
    def broken(value, ctx):
        raise KeyError("boom")

    result = await validate([Rule("x", Location.BODY, broken, "x bad")], RequestContext())

    assert [o.message for o in result.errors] == ["server error"]
    assert result.status_code == 500


@pytest.mark.asyncio
async def test_not_found_beats_bad_request():
    async def missing(value, ctx):
        return None

    rules = [
        Rule("name", Location.BODY, _fails, "name bad"),
        resource_exists(missing),
    ]

    result = await validate(rules, RequestContext(path_params={"id": "1"}))

    assert [o.message for o in result.errors] == ["name bad", "not found"]
    assert result.status_code == 404


@pytest.mark.asyncio
async def test_server_error_beats_not_found():
    async def missing(value, ctx):
        return None

    async def broken(value, ctx):
        raise RuntimeError("down")

    rules = [
        resource_exists(missing, field="id"),
        resource_exists(broken, field="season"),
    ]

    result = await validate(rules, RequestContext(path_params={"id": "1", "season": "1"}))

    assert result.status_code == 500


def test_classify_precedence_and_default():
    bad = Outcome("a", "bad")
    unauthorized = Outcome("b", "nope", ErrorKind.UNAUTHORIZED)
    not_found = Outcome("c", "not found", ErrorKind.NOT_FOUND)

    assert classify([bad]) is ErrorKind.BAD_REQUEST
    assert classify([bad, unauthorized]) is ErrorKind.UNAUTHORIZED
    assert classify([unauthorized, not_found, bad]) is ErrorKind.NOT_FOUND
    assert classify([]) is ErrorKind.BAD_REQUEST


@pytest.mark.asyncio
async def test_rule_failed_carries_its_own_message_and_kind():
    def check(value, ctx):
        raise RuleFailed("username or password incorrect", ErrorKind.UNAUTHORIZED)

    result = await validate([Rule("username", Location.BODY, check, "unused")], RequestContext())

    assert [o.message for o in result.errors] == ["username or password incorrect"]
    assert result.status_code == 401


@pytest.mark.asyncio
async def test_skip_markers_are_filtered_out():
    def skip(value, ctx):
        raise SkipOutcome()

    rules = [
        Rule("username", Location.BODY, skip, "unused"),
        Rule("password", Location.BODY, _fails, "password is required"),
    ]

    result = await validate(rules, RequestContext())

    assert [o.field for o in result.errors] == ["password"]
    with pytest.raises(ValidationFailed) as exc_info:
        gate(result)
    assert exc_info.value.to_dict() == {
        "errors": [{"field": "password", "message": "password is required"}]
    }


@pytest.mark.asyncio
async def test_only_skip_markers_means_pass():
    def skip(value, ctx):
        raise SkipOutcome()

    result = await validate([Rule("username", Location.BODY, skip, "unused")], RequestContext())

    assert result.ok


@pytest.mark.asyncio
async def test_bail_stops_the_rest_of_the_chain():
    calls: list[str] = []

    def later(value, ctx):
        calls.append("later")
        return False

    rules = [
        Rule("admin", Location.BODY, _fails, "admin must be a boolean", bail=True),
        Rule("admin", Location.BODY, later, "admin cannot change self"),
        Rule("other", Location.BODY, _fails, "other bad"),
    ]

    result = await validate(rules, RequestContext())

    assert [o.message for o in result.errors] == ["admin must be a boolean", "other bad"]
    assert calls == []


@pytest.mark.asyncio
async def test_without_bail_chain_keeps_going():
    rules = [
        Rule("admin", Location.BODY, _fails, "admin is required"),
        Rule("admin", Location.BODY, _fails, "admin must be a boolean"),
    ]

    result = await validate(rules, RequestContext())

    assert [o.message for o in result.errors] == ["admin is required", "admin must be a boolean"]


@pytest.mark.asyncio
async def test_no_rules_is_a_pass():
    ctx = RequestContext()
    assert gate(await validate([], ctx)) is ctx
