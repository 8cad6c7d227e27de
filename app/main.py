# app/main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Path, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .auth import Principal, require_principal
from .config import settings
from .core import MAX_ID, CategoryOut, HealthOut, ProductIn, ProductOut
from .database import SessionLocal, engine, get_db, init_db
from .errors import install_error_handlers
from .logic import (
    create_product_logic, delete_product_logic, get_product_logic,
    list_categories_logic, list_my_products_logic, list_products_logic,
    mark_sold_logic,
)
from .seed import seed_categories

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting marketplace API in {settings.ENVIRONMENT} mode")
    init_db()
    if settings.SEED_CATEGORIES:
        with SessionLocal() as db:
            seed_categories(db)

    yield

    logger.info("Shutting down marketplace API")
    engine.dispose()


app = FastAPI(title="marketplace", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)


# ---------------------------
# Health
# ---------------------------
@app.get("/health", response_model=HealthOut)
def health():
    return HealthOut()


# ---------------------------
# Category endpoints
# ---------------------------
@app.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return list_categories_logic(db)


# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/products", response_model=List[ProductOut])
def list_products(
    category_id: Optional[int] = Query(None, alias="categoryId", ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
):
    return list_products_logic(db, category_id)


# declared before /products/{product_id} so "mine" is not parsed as an id
@app.get("/products/mine", response_model=List[ProductOut])
def list_my_products(
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    return list_my_products_logic(db, principal)


@app.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int = Path(ge=1, le=MAX_ID), db: Session = Depends(get_db)):
    return get_product_logic(db, product_id)


@app.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    return create_product_logic(db, principal, payload)


@app.patch("/products/{product_id}/sold", response_model=ProductOut)
def mark_product_sold(
    product_id: int = Path(ge=1, le=MAX_ID),
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    return mark_sold_logic(db, principal, product_id)


@app.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int = Path(ge=1, le=MAX_ID),
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    delete_product_logic(db, principal, product_id)
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
