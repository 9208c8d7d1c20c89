from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: int = Field(alias="PRD_ID")
    code: str = Field(alias="CODE")
    name: str = Field(alias="NAME")
    unit_price: int = Field(alias="PRICE")


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(alias="DATETIME")
    employee_code: str = Field(alias="EMP_CD")
    store_code: str = Field(alias="STORE_CD")
    pos_number: str = Field(alias="POS_NO")
    total_amount: int = Field(default=0, alias="TOTAL_AMT")


class Transaction(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    transaction_id: int = Field(alias="TRD_ID")
    created_at: datetime | None = Field(default=None, alias="DATETIME")
    employee_code: str | None = Field(default=None, alias="EMP_CD")
    store_code: str | None = Field(default=None, alias="STORE_CD")
    pos_number: str | None = Field(default=None, alias="POS_NO")
    total_amount: int = Field(default=0, alias="TOTAL_AMT")


class DetailCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    detail_id: int = Field(alias="DTL_ID")
    product_id: int = Field(alias="PRD_ID")
    product_code: str = Field(alias="PRD_CODE")
    product_name: str = Field(alias="PRD_NAME")
    product_price: int = Field(alias="PRD_PRICE")


class DetailRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    detail_id: int | None = Field(default=None, alias="DTL_ID")
    transaction_id: int | None = Field(default=None, alias="TRD_ID")
    product_id: int | None = Field(default=None, alias="PRD_ID")
    product_code: str | None = Field(default=None, alias="PRD_CODE")
    product_name: str | None = Field(default=None, alias="PRD_NAME")
    product_price: int | None = Field(default=None, alias="PRD_PRICE")
