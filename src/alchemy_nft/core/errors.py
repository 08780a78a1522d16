from __future__ import annotations

from typing import Optional


class AlchemyError(Exception):
    """函式庫所有例外的基底類別。"""


class ConfigurationError(AlchemyError):
    """設定或環境變數錯誤。"""


class InvalidArgumentError(AlchemyError, ValueError):
    """參數型態或內容不符合預期，於送出請求前即拋出。"""


class AdapterError(AlchemyError):
    """Alchemy 服務或底層 HTTP 傳輸錯誤。"""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RateLimitError(AdapterError):
    """Alchemy 回應 429，請求已被限流。"""


class NormalizationError(AlchemyError):
    """回應資料無法轉換為模型。"""
