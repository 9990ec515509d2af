import copy
from dataclasses import dataclass

from pydantic import BaseModel

from jsontruncator import report, stringify


class _RecordObject:
    def __init__(self) -> None:
        self.one = "abc"
        self.two = "def"
        self.three = "ghi"
        self._hidden = "not exported"


@dataclass
class _RecordDataclass:
    one: str = "abc"
    two: str = "def"
    three: str = "ghi"


class _RecordModel(BaseModel):
    one: str = "abc"
    two: str = "def"
    three: str = "ghi"


_NO_ELLIPSIS_OBJECT_LIMITS = {
    "maxLength": 25,
    "maxItemLength": 20,
    "maxItems": 2,
    "maxRetries": 2,
    "ellipsis": "",
}


def test_short_string_is_encoded_unchanged() -> None:
    assert stringify("abc") == '"abc"'


def test_truncates_strings() -> None:
    json_text = stringify(
        "abcdef",
        {"maxLength": 5, "maxItemLength": 5, "maxRetries": 2, "ellipsisTemplate": ""},
    )
    assert json_text == '"abc"'


def test_truncates_strings_inside_arrays() -> None:
    json_text = stringify(
        ["abcdef", "ghijkl"],
        {"maxLength": 13, "maxItemLength": 5, "maxRetries": 2, "ellipsis": ""},
    )
    assert json_text == '["abc","ghi"]'


def test_truncates_arrays() -> None:
    json_text = stringify(
        ["abc", "def", "ghi"],
        {"maxLength": 13, "maxItemLength": 10, "maxItems": 2, "ellipsis": ""},
    )
    assert json_text == '["abc","def"]'


def test_truncates_dicts() -> None:
    json_text = stringify(
        {"one": "abc", "two": "def", "three": "ghi"},
        {"maxLength": 25, "maxItemLength": 20, "maxItems": 2, "ellipsis": ""},
    )
    assert json_text == '{"one":"abc","two":"def"}'


def test_truncates_plain_objects_by_public_attributes() -> None:
    assert stringify(_RecordObject(), _NO_ELLIPSIS_OBJECT_LIMITS) == '{"one":"abc","two":"def"}'


def test_truncates_dataclasses_and_models() -> None:
    assert stringify(_RecordDataclass(), _NO_ELLIPSIS_OBJECT_LIMITS) == '{"one":"abc","two":"def"}'
    assert stringify(_RecordModel(), _NO_ELLIPSIS_OBJECT_LIMITS) == '{"one":"abc","two":"def"}'


def test_truncates_long_keys() -> None:
    json_text = stringify(
        {"one-hundred-thousand": "abc", "two": "def"},
        {"maxLength": 25, "maxItemLength": 5, "maxRetries": 2, "ellipsis": ""},
    )
    assert json_text == '{"one":"abc","two":"def"}'


def test_gives_up_on_numbers_with_hard_cut() -> None:
    result = report(
        123456789,
        {"maxLength": 6, "maxItemLength": 5, "maxRetries": 2, "ellipsis": ""},
    )
    assert result.text == "123456"
    assert result.gave_up is True
    assert result.retry_count == 2
    assert result.byte_length == 6


def test_gives_up_on_nested_value_with_hard_cut() -> None:
    result = report(
        {"response": {"data": ["string"]}},
        {"maxLength": 25, "maxItemLength": 10, "maxRetries": 1, "ellipsis": ""},
    )
    assert result.text == '{"response":{"data":["str'
    assert result.gave_up is True
    assert result.retry_count == 1


def test_truncates_string_with_ellipsis() -> None:
    json_text = stringify(
        "1234567890",
        {"maxLength": 11, "maxItemLength": 11, "maxRetries": 3, "ellipsis": "..."},
    )
    assert json_text == '"123456..."'


def test_overage_counts_characters_removed_from_the_original() -> None:
    result = report(
        {"one": "12345678901234567890"},
        {"maxLength": 26, "maxItemLength": 26, "maxRetries": 3, "ellipsis": "...[%overage%]"},
    )
    assert result.text == '{"one":"123...[17]"}'
    assert result.retry_count == 2
    assert result.gave_up is False


def test_dropped_entry_count_accumulates_across_passes_in_lists() -> None:
    result = report(
        list(range(10)),
        {"maxLength": 12, "maxItemLength": 12, "maxItems": 4, "ellipsis": "+%overage%"},
    )
    assert result.text == '[0,1,"+8"]'
    assert result.retry_count == 2


def test_dropped_entry_count_accumulates_across_passes_in_dicts() -> None:
    result = report(
        {"a": 1, "b": 2, "c": 3, "d": 4},
        {"maxLength": 20, "maxItemLength": 20, "maxItems": 2, "ellipsis": "%overage% more"},
    )
    assert result.text == '{"a":1,"1":"3 more"}'
    assert result.retry_count == 2


def test_value_that_fits_costs_no_shrink_pass() -> None:
    value = {"name": "x", "items": [1, 2.5, True, None]}
    result = report(value, {"maxLength": 100, "maxItemLength": 50})
    assert result.retry_count == 0
    assert result.gave_up is False
    assert result.text == '{"name":"x","items":[1,2.5,true,null]}'
    assert result.final_config.max_length == 100


def test_order_is_preserved_for_kept_entries() -> None:
    json_text = stringify(
        {"zulu": [3, 2, 1], "alpha": "a", "mike": "m"},
        {"maxLength": 30, "maxItemLength": 30, "maxItems": 2, "ellipsis": ""},
    )
    assert json_text == '{"zulu":[3,2],"alpha":"a"}'


def test_output_never_exceeds_max_length() -> None:
    values = [
        "x" * 500,
        ["y" * 80] * 40,
        {f"key-{index}": {"nested": ["z" * 30] * 10} for index in range(30)},
        [[[[["deep" * 20]]]]],
        "é中" * 200,
    ]
    limits = [
        {"maxLength": 20, "maxItemLength": 10},
        {"maxLength": 64, "maxItemLength": 32, "maxItems": 5, "ellipsis": "...[%overage%]"},
        {"maxLength": 200, "maxItemLength": 100, "maxRetries": 1},
    ]
    for value in values:
        for overrides in limits:
            result = report(value, overrides)
            assert result.byte_length <= overrides["maxLength"]
            if result.gave_up:
                assert result.byte_length == overrides["maxLength"]


def test_caller_value_is_not_mutated() -> None:
    value = {"list": ["x" * 50] * 5, "long-key-" * 5: {"a": "b" * 40}}
    original = copy.deepcopy(value)
    stringify(value, {"maxLength": 40, "maxItemLength": 12, "maxItems": 2})
    assert value == original


def test_identical_inputs_give_identical_reports() -> None:
    value = {"a": ["b" * 100] * 20, "c": {"d": "e" * 300}}
    overrides = {"maxLength": 90, "maxItemLength": 40, "maxItems": 3, "ellipsis": "~%overage%"}
    assert report(value, overrides) == report(value, overrides)


def test_hard_cut_may_split_a_multibyte_character() -> None:
    result = report(12345, {"maxLength": 3, "maxItemLength": 3, "maxRetries": 1})
    assert result.data == b"123"

    result = report("中中中中", {"maxLength": 3, "maxItemLength": 3, "maxRetries": 1, "ellipsis": ""})
    assert result.gave_up is True
    assert result.byte_length == 3
    assert result.data == b"\"\xe4\xb8"
    assert result.text == "\""
