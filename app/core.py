from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Product

# Request/response schemas. JSON field names are camelCase.

# SQLite INTEGER / Postgres BIGINT upper bound
MAX_ID = 2**63 - 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CategoryOut(CamelModel):
    id: int
    name: str


class ProductIn(CamelModel):
    category_id: int = Field(ge=1, le=MAX_ID)
    title: str = Field(min_length=1, max_length=160)
    # stored as Numeric(10, 2); more decimals would round on write
    price: Decimal = Field(gt=0, le=Decimal("99999999.99"), decimal_places=2)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=160)
    image_url: Optional[str] = Field(default=None, max_length=500)
    show_email: bool = True
    show_whatsapp: bool = False
    show_messenger: bool = False

    @field_validator("price", mode="before")
    @classmethod
    def _float_price_as_written(cls, v):
        # 19.99 must not become 19.989999...
        if isinstance(v, float):
            return str(v)
        return v

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("description", "location", "image_url")
    @classmethod
    def _empty_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductOut(CamelModel):
    id: int
    user_id: int
    category_id: int
    title: str
    description: Optional[str] = None
    price: Decimal
    location: Optional[str] = None
    image_url: Optional[str] = None
    is_sold: bool
    show_email: bool
    show_whatsapp: bool
    show_messenger: bool
    created_at: datetime


class HealthOut(BaseModel):
    status: str = "ok"


def _make_product(user_id: int, p: ProductIn) -> Product:
    return Product(
        user_id=user_id,
        category_id=p.category_id,
        title=p.title,
        description=p.description,
        price=p.price,
        location=p.location,
        image_url=p.image_url,
        is_sold=False,
        show_email=p.show_email,
        show_whatsapp=p.show_whatsapp,
        show_messenger=p.show_messenger,
    )
