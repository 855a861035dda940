from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class Record(BaseModel):
    # camelCase on the wire and on disk, snake_case in Python
    model_config = ConfigDict(populate_by_name=True)

    id: int


class Category(Record):
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None


class Floor(Record):
    number: int
    name: str
    description: Optional[str] = None


class Shop(Record):
    name: str
    category: int
    floor: int
    shop_number: Optional[str] = Field(None, alias="shopNumber")
    description: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    hours: Optional[str] = None


class Offer(Record):
    title: str
    shop_id: int = Field(alias="shopId")
    discount: int = 0
    description: Optional[str] = None
    valid_from: str = Field(alias="validFrom")
    valid_until: str = Field(alias="validUntil")

