"""
Provider response DTOs (Pydantic v2) returned across the provider boundary.

A provider answers every action with exactly one of three variants:
Success, Failure or Redirect (asynchronous, off-site flows such as 3-D Secure).
"""
from __future__ import annotations

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class _BaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_redirect(self) -> bool:
        return False


class Success(_BaseResponse):
    kind: Literal["success"] = "success"
    transaction_id: str
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return True


class Failure(_BaseResponse):
    kind: Literal["failure"] = "failure"
    reason: str

    @property
    def message(self) -> str:
        return self.reason


class Redirect(_BaseResponse):
    kind: Literal["redirect"] = "redirect"
    transaction_id: str
    redirect_url: str

    @property
    def is_redirect(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return f"redirect to {self.redirect_url}"


Response = Annotated[Union[Success, Failure, Redirect], Field(discriminator="kind")]

RESPONSE_TYPES = (Success, Failure, Redirect)
