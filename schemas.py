from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class Payload(BaseModel):
    """Request body for create and update.

    Every field is optional at the schema level; required fields are checked
    by the catalog rules so that a missing field is reported as a 400 that
    lists all missing names at once.
    """

    model_config = ConfigDict(populate_by_name=True)

    def supplied(self) -> dict:
        # only what the caller actually sent, keyed by wire name
        return self.model_dump(by_alias=True, exclude_unset=True)


class CategoryCreate(Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class CategoryUpdate(CategoryCreate):
    pass


class FloorCreate(Payload):
    number: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


class FloorUpdate(FloorCreate):
    pass


class ShopCreate(Payload):
    name: Optional[str] = None
    category: Optional[int] = None
    floor: Optional[int] = None
    shop_number: Optional[str] = Field(None, alias="shopNumber")
    description: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    hours: Optional[str] = None


class ShopUpdate(ShopCreate):
    pass


class OfferCreate(Payload):
    title: Optional[str] = None
    shop_id: Optional[int] = Field(None, alias="shopId")
    discount: Optional[int] = None
    description: Optional[str] = None
    valid_from: Optional[str] = Field(None, alias="validFrom")
    valid_until: Optional[str] = Field(None, alias="validUntil")


class OfferUpdate(OfferCreate):
    pass


class AdminLogin(BaseModel):
    username: str
    password: str


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    email: str
    password: str


class PublicUser(BaseModel):
    id: int
    name: str
    email: str
    phone: str = ""


class UserProfile(PublicUser):
    model_config = ConfigDict(populate_by_name=True)

    created_at: str = Field(alias="createdAt")


class AdminInfo(BaseModel):
    id: int
    username: str
    role: str


class AdminLoginResponse(BaseModel):
    success: bool = True
    user: AdminInfo
    access_token: str
    token_type: str = "bearer"


class UserLoginResponse(BaseModel):
    success: bool = True
    user: PublicUser
    access_token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "Registration successful"
    user: PublicUser


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class Stats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_shops: int = Field(alias="totalShops")
    total_offers: int = Field(alias="totalOffers")
    active_offers: int = Field(alias="activeOffers")
    total_categories: int = Field(alias="totalCategories")
    total_floors: int = Field(alias="totalFloors")
