import json

from hypothesis import given
from hypothesis import strategies as st
from structlog.testing import capture_logs

from kv_storage.serialization import normalize_result, parse_hash, prepare_hash, prepare_string


_JSON_SCALARS = st.none() | st.booleans() | st.integers(min_value=-10_000, max_value=10_000)
_JSON_VALUES = st.recursive(
    _JSON_SCALARS,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=12), children, max_size=4),
    max_leaves=15,
)


def test_prepare_string_keeps_strings_and_encodes_the_rest() -> None:
    assert prepare_string("plain") == "plain"
    assert prepare_string({"a": [1, 2]}) == '{"a": [1, 2]}'
    assert prepare_string(3) == "3"
    assert prepare_string(None) == "null"


def test_prepare_hash_flattens_lists_into_value_field() -> None:
    assert prepare_hash([1, "two"]) == {"value": '[1, "two"]'}


def test_prepare_hash_encodes_only_non_string_fields() -> None:
    assert prepare_hash({"name": "bob", "age": 3, "meta": {"x": None}}) == {
        "name": "bob",
        "age": "3",
        "meta": '{"x": null}',
    }


def test_prepare_hash_returns_other_values_unchanged() -> None:
    assert prepare_hash(5) == 5
    assert prepare_hash(None) is None


def test_parse_hash_keeps_non_json_text() -> None:
    assert parse_hash({"name": "bob", "age": "3"}) == {"name": "bob", "age": 3}


def test_parse_hash_decodes_bytes_fields() -> None:
    assert parse_hash({b"count": b"[1]"}) == {"count": [1]}


def test_parse_hash_returns_non_mappings_unchanged() -> None:
    assert parse_hash(None) is None
    assert parse_hash(["a"]) == ["a"]


def test_parse_hash_logs_each_value() -> None:
    with capture_logs() as logs:
        _ = parse_hash({"a": "1"})
    assert logs == [{"event": "[ parse HASH ] Value: 1", "log_level": "debug"}]


def test_normalize_result_decodes_nested_replies() -> None:
    assert normalize_result((b"q", b"item")) == ["q", "item"]
    assert normalize_result(b"x") == "x"
    assert normalize_result(3) == 3
    assert normalize_result(None) is None


@given(st.dictionaries(st.text(min_size=1, max_size=12), _JSON_VALUES, max_size=6))
def test_prepare_then_parse_restores_non_string_fields(data: dict) -> None:
    assert parse_hash(prepare_hash(data)) == data


@given(st.lists(_JSON_VALUES, max_size=5))
def test_prepare_then_parse_restores_lists(data: list) -> None:
    assert parse_hash(prepare_hash(data)) == {"value": data}


@given(_JSON_VALUES)
def test_prepare_string_is_json_text_for_non_strings(value: object) -> None:
    assert json.loads(prepare_string(value)) == value
