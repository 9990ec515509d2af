from jsontruncator import to_bounded_json


def test_small_payload_is_plain_json() -> None:
    assert to_bounded_json({"a": 1, "b": ["x"]}) == '{"a":1,"b":["x"]}'


def test_long_payload_is_shrunk_with_marker() -> None:
    assert to_bounded_json("x" * 100, max_len=30) == '"xxxxxxxxx...(91 more)"'


def test_unencodable_payload_falls_back_to_repr() -> None:
    assert to_bounded_json({"a": float("nan")}) == "{'a': nan}"


def test_repr_fallback_is_bounded() -> None:
    text = to_bounded_json(set(range(100)), max_len=20)
    assert len(text) == 20
    assert text.endswith("...<truncated>")
