from fastapi import APIRouter

router = APIRouter()


def _entry(href: str, *methods: str) -> dict:
    return {"href": href, "methods": list(methods)}


INDEX = {
    "tv": {
        "series": _entry("/tv", "GET", "POST"),
        "serie": _entry("/tv/{id}", "GET", "PATCH", "DELETE"),
        "rate": _entry("/tv/{id}/rate", "POST", "PATCH", "DELETE"),
        "state": _entry("/tv/{id}/state", "POST", "PATCH", "DELETE"),
    },
    "seasons": {
        "seasons": _entry("/tv/{id}/season", "GET", "POST"),
        "season": _entry("/tv/{id}/season/{season}", "GET", "DELETE"),
    },
    "episodes": {
        "episodes": _entry("/tv/{id}/season/{season}/episode", "POST"),
        "episode": _entry("/tv/{id}/season/{season}/episode/{episode}", "GET", "DELETE"),
    },
    "genres": {
        "genres": _entry("/genres", "GET", "POST"),
    },
    "users": {
        "users": _entry("/users", "GET"),
        "user": _entry("/users/{id}", "GET", "PATCH"),
        "register": _entry("/users/register", "POST"),
        "login": _entry("/users/login", "POST"),
        "me": _entry("/users/me", "GET", "PATCH"),
    },
}


@router.get("/")
async def index():
    return INDEX
