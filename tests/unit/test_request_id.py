import pytest

from app.utils.request_id import resolve_request_id, validate_request_id


@pytest.mark.parametrize("value", ["abc", "trace-1.2_3", "a" * 64])
def test_safe_request_ids_are_kept(value):
    assert validate_request_id(value) == value
    assert resolve_request_id(value) == value


@pytest.mark.parametrize("value", [None, "", "a" * 65, "has space", "new\nline", "ünïcode"])
def test_unsafe_request_ids_are_replaced(value):
    assert validate_request_id(value) is None

    fresh = resolve_request_id(value)
    assert fresh != value
    assert len(fresh) == 32
