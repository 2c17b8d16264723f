"""Rule sets attached to the HTTP routes."""

from __future__ import annotations

from app.core.catalog.episodes import fetch_episode
from app.core.catalog.genres import fetch_genre_by_name
from app.core.catalog.seasons import fetch_season, fetch_season_by_body_number
from app.core.catalog.series import SERIE_FIELDS, fetch_serie, fetch_serie_detail
from app.core.tracking.service import fetch_rating, fetch_state
from app.core.users.service import (
    fetch_user,
    fetch_user_by_email,
    fetch_user_by_username,
    verify_credentials,
)
from app.core.validation.pipeline import Location, Rule
from app.core.validation.rules import (
    admin_flag_rules,
    at_least_one_of,
    credentials_rule,
    has_length,
    image_rule,
    is_boolean,
    is_date,
    is_email,
    is_in,
    is_int,
    is_present,
    is_string,
    optional_on_patch,
    paging_rules,
    path_ints_valid,
    positive_id,
    resource_exists,
    resource_not_exists,
)
from app.db.models.tracking import WATCH_STATES

BODY = Location.BODY

RATINGS = (0, 1, 2, 3, 4, 5)


# --- Users ---

USERNAME_RULE = Rule(
    field="username",
    location=BODY,
    check=has_length(min_length=1, max_length=256),
    message="username is required, max 256 characters",
    bail=True,
)


def _email_rule(*, patch: bool = False) -> Rule:
    return Rule(
        field="email",
        location=BODY,
        check=is_email,
        message="email is required, max 256 characters",
        run_if=optional_on_patch("email") if patch else None,
        bail=True,
    )


def _password_rule(*, patch: bool = False) -> Rule:
    return Rule(
        field="password",
        location=BODY,
        check=has_length(min_length=10, max_length=256),
        message="password is required, min 10 characters, max 256 characters",
        run_if=optional_on_patch("password") if patch else None,
    )


EMAIL_NOT_EXISTS = resource_not_exists(
    fetch_user_by_email, field="email", location=BODY, message="email already exists", optional=True
)

register_rules = [
    USERNAME_RULE,
    resource_not_exists(
        fetch_user_by_username, field="username", location=BODY, message="username already exists"
    ),
    _email_rule(),
    EMAIL_NOT_EXISTS,
    _password_rule(),
]

login_rules = [
    USERNAME_RULE,
    _password_rule(),
    credentials_rule(verify_credentials),
]

me_patch_rules = [
    at_least_one_of(["email", "password"]),
    _email_rule(patch=True),
    EMAIL_NOT_EXISTS,
    _password_rule(patch=True),
]

user_exists_rules = [positive_id("id"), resource_exists(fetch_user)]

user_admin_patch_rules = [*user_exists_rules, *admin_flag_rules()]


# --- Paging ---

list_rules = paging_rules()


# --- Series ---

# Bails: later rules on the id field assume the serie exists.
serie_exists_rules = [positive_id("id"), resource_exists(fetch_serie, bail=True)]

serie_detail_rules = [positive_id("id"), resource_exists(fetch_serie_detail)]


def _serie_field_rules() -> list[Rule]:
    return [
        Rule(
            field="name",
            location=BODY,
            check=has_length(min_length=1, max_length=128),
            message="name is required, max 128 characters",
            run_if=optional_on_patch("name"),
        ),
        Rule(
            field="airDate",
            location=BODY,
            check=is_date,
            message="airDate must be a date",
            run_if=optional_on_patch("airDate"),
        ),
        Rule(
            field="inProduction",
            location=BODY,
            check=is_present,
            message="inProduction is required",
            run_if=optional_on_patch("inProduction"),
            bail=True,
        ),
        Rule(
            field="inProduction",
            location=BODY,
            check=is_boolean(),
            message="inProduction must be a boolean",
            run_if=optional_on_patch("inProduction"),
        ),
        Rule(
            field="tagline",
            location=BODY,
            check=is_string(),
            message="tagline must be a string",
            optional=True,
        ),
        image_rule("image"),
        Rule(
            field="description",
            location=BODY,
            check=is_string(min_length=1),
            message="description must be a string",
            run_if=optional_on_patch("description"),
        ),
        Rule(
            field="language",
            location=BODY,
            check=is_string(min_length=2, max_length=2),
            message="language must be a string of length 2",
            run_if=optional_on_patch("language"),
        ),
        Rule(
            field="network",
            location=BODY,
            check=is_string(),
            message="network must be a string",
            optional=True,
        ),
        Rule(
            field="url",
            location=BODY,
            check=is_string(),
            message="url must be a string",
            optional=True,
        ),
    ]


serie_create_rules = _serie_field_rules()

serie_patch_rules = [
    *serie_exists_rules,
    at_least_one_of(list(SERIE_FIELDS), files=["image"]),
    *_serie_field_rules(),
]


# --- Ratings and watch state ---

RATING_RULE = Rule(
    field="rating",
    location=BODY,
    check=is_in(RATINGS),
    message="rating must be an integer, one of 0, 1, 2, 3, 4, 5",
)

STATE_RULE = Rule(
    field="state",
    location=BODY,
    check=is_in(WATCH_STATES),
    message='state must be one of "want to watch", "watching", "watched"',
)

rating_create_rules = [*serie_exists_rules, resource_not_exists(fetch_rating), RATING_RULE]
rating_update_rules = [*serie_exists_rules, resource_exists(fetch_rating, attach_as="rating"), RATING_RULE]
rating_delete_rules = [*serie_exists_rules, resource_exists(fetch_rating, attach_as="rating")]

state_create_rules = [*serie_exists_rules, resource_not_exists(fetch_state), STATE_RULE]
state_update_rules = [*serie_exists_rules, resource_exists(fetch_state, attach_as="state"), STATE_RULE]
state_delete_rules = [*serie_exists_rules, resource_exists(fetch_state, attach_as="state")]


# --- Seasons ---

def _number_rules(fetch_existing, what: str, *, parents: tuple[str, ...]) -> list[Rule]:
    return [
        Rule(
            field="number",
            location=BODY,
            check=is_int(min_value=1),
            message="number must be an integer larger than 0",
            bail=True,
        ),
        resource_not_exists(
            fetch_existing,
            field="number",
            location=BODY,
            message=f"{what} already exists",
            run_if=path_ints_valid(*parents),
        ),
    ]


def _episode_like_rules() -> list[Rule]:
    return [
        Rule(
            field="name",
            location=BODY,
            check=has_length(min_length=1, max_length=128),
            message="name is required, max 128 characters",
        ),
        Rule(
            field="airDate",
            location=BODY,
            check=is_date,
            message="airDate must be a date",
            optional=True,
        ),
        Rule(
            field="overview",
            location=BODY,
            check=is_string(),
            message="overview must be a string",
            optional=True,
        ),
    ]


season_list_rules = [*serie_exists_rules, *paging_rules()]

season_create_rules = [
    *serie_exists_rules,
    *_episode_like_rules(),
    *_number_rules(fetch_season_by_body_number, "season", parents=("id",)),
    image_rule("image"),
]

# A malformed serie id is reported by its own rule; the season lookup waits for it.
season_rules = [
    positive_id("id"),
    positive_id("season"),
    resource_exists(fetch_season, field="season", location=Location.PATH, run_if=path_ints_valid("id")),
]

# --- Episodes ---

episode_create_rules = [
    *season_rules,
    *_episode_like_rules(),
    *_number_rules(fetch_episode, "episode", parents=("id", "season")),
]

episode_rules = [
    positive_id("id"),
    positive_id("season"),
    positive_id("episode"),
    resource_exists(
        fetch_episode,
        field="episode",
        location=Location.PATH,
        run_if=path_ints_valid("id", "season"),
    ),
]


# --- Genres ---

genre_create_rules = [
    Rule(
        field="name",
        location=BODY,
        check=has_length(min_length=1, max_length=128),
        message="name is required, max 128 characters",
        bail=True,
    ),
    resource_not_exists(fetch_genre_by_name, field="name", location=BODY, message="genre already exists"),
]
