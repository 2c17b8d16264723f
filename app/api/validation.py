"""FastAPI glue for the validation pipeline.

``Depends(validated(rules))`` reads the request into a
:class:`~app.core.validation.pipeline.RequestContext`, runs the rules and
either returns the context (with any resolved resources attached) or raises
:class:`~app.core.validation.pipeline.ValidationFailed`.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from fastapi import Depends, Request
from starlette.datastructures import UploadFile

from app.api.deps import get_optional_user, get_session_factory
from app.core.validation.pipeline import (
    Location,
    Outcome,
    RequestContext,
    Rule,
    UploadedFile,
    ValidationFailed,
    gate,
    validate,
)
from app.db.models.user import User
from app.utils.exceptions import BadRequestException
from app.utils.metrics import VALIDATION_FAILURES_TOTAL

_BODY_METHODS = frozenset({"POST", "PATCH", "PUT"})
_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _invalid_body(message: str) -> ValidationFailed:
    return ValidationFailed([Outcome("body", message, location=Location.BODY)])


async def read_body(request: Request) -> tuple[dict[str, Any], dict[str, UploadedFile]]:
    if request.method.upper() not in _BODY_METHODS:
        return {}, {}

    content_type = (request.headers.get("content-type") or "").split(";")[0].strip().lower()

    if content_type.startswith(_FORM_TYPES):
        body: dict[str, Any] = {}
        files: dict[str, UploadedFile] = {}
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if not value.filename:
                    continue
                files[key] = UploadedFile(
                    filename=value.filename,
                    content_type=value.content_type or "",
                    content=await value.read(),
                )
            else:
                body[key] = value
        return body, files

    raw = await request.body()
    if content_type == "application/json" or content_type.endswith("+json"):
        if not raw.strip():
            return {}, {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            raise _invalid_body("body must be valid json")
        if not isinstance(parsed, dict):
            raise _invalid_body("body must be a json object")
        return parsed, {}

    if raw:
        raise BadRequestException("body must be json or form-data")
    return {}, {}


def validated(rules: Sequence[Rule]):
    frozen_rules = tuple(rules)

    async def dependency(
        request: Request,
        user: Optional[User] = Depends(get_optional_user),
        session_factory=Depends(get_session_factory),
    ) -> RequestContext:
        body, files = await read_body(request)
        ctx = RequestContext(
            method=request.method,
            path=request.url.path,
            body=body,
            query=dict(request.query_params),
            path_params=dict(request.path_params),
            files=files,
            user=user,
            session_factory=session_factory,
        )
        result = await validate(frozen_rules, ctx)
        if not result.ok:
            VALIDATION_FAILURES_TOTAL.labels(kind=result.kind.value).inc()
        return gate(result)

    return dependency
