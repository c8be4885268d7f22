from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class Product(BaseModel):
    """One catalog row as returned by the store."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    title: str
    price: float
    rating: Optional[float] = None  # 0-5 stars
    seller_reputation: Optional[int] = None  # 0-5
    brand: Optional[str] = None
    cpu: Optional[str] = None
    disk: Optional[int] = None  # MB
    ram: Optional[int] = None  # MB
    post_url: Optional[str] = None
    img_url: Optional[str] = None
    free_shipping: bool = False


class ParsedIntent(BaseModel):
    """
    The model's classification of a request. On success `payload` is a candidate SQL
    statement; on error it is the model's reason for refusing.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["success", "error"] = Field(alias="type")
    payload: StrictStr = Field(alias="data")


class SuccessOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["success"] = "success"
    sql: str
    products: List[Product] = Field(default_factory=list)


class ErrorOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str


Outcome = Union[SuccessOutcome, ErrorOutcome]
