import pytest

from alchemy_nft.core.errors import InvalidArgumentError
from alchemy_nft.core.utils import drop_none, normalize_token_id


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (7, "7"),
        ("42", "42"),
        ("0x2a", "42"),
        ("0X0000000000000000000000000000000000000000000000000000000000000010", "16"),
        (2**200, str(2**200)),
    ],
)
def test_normalize_token_id_accepts_big_numberish(value, expected) -> None:
    assert normalize_token_id(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "-1", -3, True, 1.5, None])
def test_normalize_token_id_rejects_invalid_values(value) -> None:
    with pytest.raises(InvalidArgumentError):
        normalize_token_id(value)


def test_drop_none_keeps_falsy_values() -> None:
    assert drop_none({"a": None, "b": False, "c": 0}) == {"b": False, "c": 0}
