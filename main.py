import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import CatalogStore, db
from dependencies import get_store, require_admin
from errors import CatalogError, MissingFieldsError, PersistenceError
from models import Category, Floor, Offer, Shop
from rules import filter_offers, filter_shops, public_customer
from schemas import (
    AdminLogin,
    AdminInfo,
    AdminLoginResponse,
    CategoryCreate,
    CategoryUpdate,
    DeleteResponse,
    FloorCreate,
    FloorUpdate,
    OfferCreate,
    OfferUpdate,
    RegisterResponse,
    ShopCreate,
    ShopUpdate,
    Stats,
    UserCreate,
    UserLogin,
    UserLoginResponse,
    UserProfile,
)
from security import DUMMY_HASH, create_access_token, verify_password

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

admin_only = [Depends(require_admin)]


def _supplied(body) -> dict:
    # an absent body is an empty payload; the rules report what is missing
    return body.supplied() if body is not None else {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading catalog from %s", settings.DATA_FILE)
    db.load()
    logger.info("Default admin username: %s", settings.ADMIN_USERNAME)
    yield
    logger.info("Shutting down mall directory API")


app = FastAPI(
    title="Mall Directory API",
    description="Shops, offers, categories and floors of a shopping mall",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if isinstance(exc, PersistenceError):
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
    content = {"detail": exc.message}
    if isinstance(exc, MissingFieldsError):
        content["missing"] = exc.missing
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    missing = [str(e["loc"][-1]) for e in errors if e["type"] == "missing"]
    invalid = [str(e["loc"][-1]) for e in errors if e["type"] != "missing"]
    if invalid:
        content = {"detail": f"Invalid value for: {', '.join(invalid)}"}
    else:
        content = {"detail": f"Missing required fields: {', '.join(missing)}"}
    if missing:
        content["missing"] = missing
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Global exception: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Something went wrong!"})


@app.get("/")
def root():
    return {"message": "Mall Directory API", "status": "running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


# Admin login
@app.post("/api/auth/login", response_model=AdminLoginResponse)
def admin_login(body: AdminLogin, store: CatalogStore = Depends(get_store)):
    user = store.find_user(body.username)
    hashed = user.get("passwordHash") if user is not None else DUMMY_HASH
    if not verify_password(body.password, hashed) or user is None:
        logger.warning("Failed admin login for '%s'", body.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user["username"], user["role"], user["id"])
    return {
        "user": AdminInfo(id=user["id"], username=user["username"], role=user["role"]),
        "access_token": token,
    }


# Customer registration
@app.post("/api/auth/user-register", response_model=RegisterResponse, status_code=201)
def register_user(body: Optional[UserCreate] = None, store: CatalogStore = Depends(get_store)):
    customer = store.add_customer((body or UserCreate()).model_dump())
    return {"user": public_customer(customer)}


# Customer login
@app.post("/api/auth/user-login", response_model=UserLoginResponse)
def login_user(body: UserLogin, store: CatalogStore = Depends(get_store)):
    customer = store.authenticate_customer(body.email, body.password)
    token = create_access_token(customer["email"], "customer", customer["id"])
    return {"user": public_customer(customer), "access_token": token}


@app.get("/api/user/profile/{user_id}", response_model=UserProfile)
def get_user_profile(user_id: int, store: CatalogStore = Depends(get_store)):
    customer = store.get_customer(user_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {**public_customer(customer), "createdAt": customer["createdAt"]}


# ============== SHOPS ==============

@app.get("/api/shops", response_model=List[Shop])
def list_shops(
    category: Optional[int] = None,
    floor: Optional[int] = None,
    search: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
):
    return filter_shops(store.list("shops"), category=category, floor=floor, search=search)


@app.get("/api/shops/{shop_id}", response_model=Shop)
def get_shop(shop_id: int, store: CatalogStore = Depends(get_store)):
    return store.get("shops", shop_id)


@app.get("/api/shops/{shop_id}/offers", response_model=List[Offer])
def list_shop_offers(shop_id: int, store: CatalogStore = Depends(get_store)):
    store.get("shops", shop_id)
    return filter_offers(store.list("offers"), shop_id=shop_id)


@app.post("/api/shops", response_model=Shop, status_code=201, dependencies=admin_only)
def create_shop(body: Optional[ShopCreate] = None, store: CatalogStore = Depends(get_store)):
    return store.insert("shops", _supplied(body))


@app.put("/api/shops/{shop_id}", response_model=Shop, dependencies=admin_only)
def update_shop(shop_id: int, body: Optional[ShopUpdate] = None, store: CatalogStore = Depends(get_store)):
    return store.update("shops", shop_id, _supplied(body))


# Deleting a shop also deletes its offers
@app.delete("/api/shops/{shop_id}", response_model=DeleteResponse, dependencies=admin_only)
def delete_shop(shop_id: int, store: CatalogStore = Depends(get_store)):
    store.delete("shops", shop_id)
    return {"message": "Shop deleted successfully"}


# ============== OFFERS ==============

@app.get("/api/offers", response_model=List[Offer])
def list_offers(
    shop_id: Optional[int] = Query(None, alias="shopId"),
    active: bool = False,
    store: CatalogStore = Depends(get_store),
):
    return filter_offers(store.list("offers"), shop_id=shop_id, active=active)


@app.get("/api/offers/{offer_id}", response_model=Offer)
def get_offer(offer_id: int, store: CatalogStore = Depends(get_store)):
    return store.get("offers", offer_id)


@app.post("/api/offers", response_model=Offer, status_code=201, dependencies=admin_only)
def create_offer(body: Optional[OfferCreate] = None, store: CatalogStore = Depends(get_store)):
    return store.insert("offers", _supplied(body))


@app.put("/api/offers/{offer_id}", response_model=Offer, dependencies=admin_only)
def update_offer(offer_id: int, body: Optional[OfferUpdate] = None, store: CatalogStore = Depends(get_store)):
    return store.update("offers", offer_id, _supplied(body))


@app.delete("/api/offers/{offer_id}", response_model=DeleteResponse, dependencies=admin_only)
def delete_offer(offer_id: int, store: CatalogStore = Depends(get_store)):
    store.delete("offers", offer_id)
    return {"message": "Offer deleted successfully"}


# ============== CATEGORIES ==============

@app.get("/api/categories", response_model=List[Category])
def list_categories(store: CatalogStore = Depends(get_store)):
    return store.list("categories")


@app.get("/api/categories/{category_id}", response_model=Category)
def get_category(category_id: int, store: CatalogStore = Depends(get_store)):
    return store.get("categories", category_id)


@app.post("/api/categories", response_model=Category, status_code=201, dependencies=admin_only)
def create_category(body: Optional[CategoryCreate] = None, store: CatalogStore = Depends(get_store)):
    return store.insert("categories", _supplied(body))


@app.put("/api/categories/{category_id}", response_model=Category, dependencies=admin_only)
def update_category(category_id: int, body: Optional[CategoryUpdate] = None, store: CatalogStore = Depends(get_store)):
    return store.update("categories", category_id, _supplied(body))


# Refused while any shop is still in the category
@app.delete("/api/categories/{category_id}", response_model=DeleteResponse, dependencies=admin_only)
def delete_category(category_id: int, store: CatalogStore = Depends(get_store)):
    store.delete("categories", category_id)
    return {"message": "Category deleted successfully"}


# ============== FLOORS ==============

@app.get("/api/floors", response_model=List[Floor])
def list_floors(store: CatalogStore = Depends(get_store)):
    return store.list("floors")


@app.get("/api/floors/{floor_id}", response_model=Floor)
def get_floor(floor_id: int, store: CatalogStore = Depends(get_store)):
    return store.get("floors", floor_id)


@app.post("/api/floors", response_model=Floor, status_code=201, dependencies=admin_only)
def create_floor(body: Optional[FloorCreate] = None, store: CatalogStore = Depends(get_store)):
    return store.insert("floors", _supplied(body))


@app.put("/api/floors/{floor_id}", response_model=Floor, dependencies=admin_only)
def update_floor(floor_id: int, body: Optional[FloorUpdate] = None, store: CatalogStore = Depends(get_store)):
    return store.update("floors", floor_id, _supplied(body))


@app.delete("/api/floors/{floor_id}", response_model=DeleteResponse, dependencies=admin_only)
def delete_floor(floor_id: int, store: CatalogStore = Depends(get_store)):
    store.delete("floors", floor_id)
    return {"message": "Floor deleted successfully"}


# ============== STATISTICS ==============

@app.get("/api/stats", response_model=Stats)
def get_stats(store: CatalogStore = Depends(get_store)):
    return store.stats()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, log_level="info")
