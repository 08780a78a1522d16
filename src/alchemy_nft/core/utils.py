from __future__ import annotations

from typing import Any, Dict, Union

from .errors import InvalidArgumentError

# 與 ethers 的 BigNumberish 對應：整數、十進位字串或 0x 開頭的十六進位字串。
BigNumberish = Union[int, str]


def is_hex(value: str) -> bool:
    """判斷字串是否為 0x 開頭的十六進位表示。"""

    return value[:2].lower() == "0x"


def normalize_token_id(token_id: BigNumberish) -> str:
    """將 token id 轉為十進位字串。"""

    if isinstance(token_id, bool) or not isinstance(token_id, (int, str)):
        raise InvalidArgumentError(f"token id 型態不正確：{token_id!r}")

    if isinstance(token_id, int):
        value = token_id
    else:
        text = token_id.strip()
        if not text:
            raise InvalidArgumentError("token id 不可為空字串")
        try:
            value = int(text, 16) if is_hex(text) else int(text, 10)
        except ValueError as error:
            raise InvalidArgumentError(f"無法解析 token id：{token_id!r}") from error

    if value < 0:
        raise InvalidArgumentError(f"token id 不可為負數：{token_id!r}")
    return str(value)


def drop_none(params: Dict[str, Any]) -> Dict[str, Any]:
    """移除值為 None 的查詢參數。"""

    return {key: value for key, value in params.items() if value is not None}

