import logging

from fastapi import APIRouter, Depends, Form, File, UploadFile

from config.constants import ROLE_CUSTOMER, ROLE_SELLER
from models.product import ProductFields
from utils.audit import log_audit
from utils.context import AppContext, get_context
from utils.errors import NotFound
from utils.products import build_product_doc
from utils.security import get_optional_user, get_seller_record, get_owned_product
from utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])


async def _upload_if_present(ctx: AppContext, image: UploadFile | None) -> str | None:
    if image is None or not image.filename:
        return None
    return await ctx.relay.store(image)


# =========================
# SELLER ADD PRODUCT
# =========================

@router.post("/product/add")
async def add_product(
    brand: str = Form(..., min_length=1),
    model: str = Form(..., min_length=1),
    productType: str = Form(..., min_length=1),
    price: float = Form(..., gt=0),
    color: str | None = Form(None),
    storage: str | None = Form(None),
    ram: str | None = Form(None),
    image: UploadFile | None = File(None),
    seller=Depends(get_seller_record),
    ctx: AppContext = Depends(get_context),
):
    image_url = await _upload_if_present(ctx, image)

    fields = ProductFields(
        brand=brand,
        model=model,
        productType=productType,
        color=color,
        storage=storage,
        ram=ram,
        price=price,
        image=image_url,
    )
    product = await ctx.products.insert(build_product_doc(seller, fields))

    await log_audit(
        ctx.db,
        actor_id=str(seller["_id"]),
        actor_role=ROLE_SELLER,
        action="PRODUCT_CREATED",
        metadata={"product_id": str(product["_id"])},
    )
    logger.info("PRODUCT_CREATED seller=%s product=%s", seller["_id"], product["_id"])

    return {
        "message": "Product added successfully",
        "product": serialize_doc(product),
    }


# =========================
# LIST ALL PRODUCTS (PUBLIC)
# =========================

@router.get("/products")
async def list_products(
    user=Depends(get_optional_user),
    ctx: AppContext = Depends(get_context),
):
    products = await ctx.products.list_all()

    return {
        "products": serialize_docs(products),
        "userRole": user.get("role", ROLE_CUSTOMER) if user else ROLE_CUSTOMER,
    }


# =========================
# CURRENT SELLER PRODUCTS
# =========================

@router.get("/products/my")
async def my_products(
    seller=Depends(get_seller_record),
    ctx: AppContext = Depends(get_context),
):
    products = await ctx.products.list_by_seller(seller["_id"])
    return {"products": serialize_docs(products)}


# =========================
# UPDATE PRODUCT (OWNER ONLY)
# =========================

@router.put("/product/update/{product_id}")
async def update_product(
    brand: str | None = Form(None),
    model: str | None = Form(None),
    productType: str | None = Form(None),
    color: str | None = Form(None),
    storage: str | None = Form(None),
    ram: str | None = Form(None),
    price: float | None = Form(None, gt=0),
    image: UploadFile | None = File(None),
    product=Depends(get_owned_product),
    ctx: AppContext = Depends(get_context),
):
    image_url = await _upload_if_present(ctx, image)

    changes = ProductFields(
        brand=brand,
        model=model,
        productType=productType,
        color=color,
        storage=storage,
        ram=ram,
        price=price,
        image=image_url,
    )
    updated = await ctx.products.update(product["_id"], changes)
    if not updated:
        # deleted between the ownership check and the write
        raise NotFound("Product not found")

    await log_audit(
        ctx.db,
        actor_id=str(product["sellerId"]),
        actor_role=ROLE_SELLER,
        action="PRODUCT_UPDATED",
        metadata={
            "product_id": str(product["_id"]),
            "fields": sorted(changes.model_dump(exclude_none=True)),
        },
    )

    return {
        "message": "Product updated successfully",
        "product": serialize_doc(updated),
    }


# =========================
# DELETE PRODUCT (OWNER ONLY)
# =========================

@router.delete("/product/delete/{product_id}")
async def delete_product(
    product=Depends(get_owned_product),
    ctx: AppContext = Depends(get_context),
):
    if not await ctx.products.delete(product["_id"]):
        raise NotFound("Product not found")

    await log_audit(
        ctx.db,
        actor_id=str(product["sellerId"]),
        actor_role=ROLE_SELLER,
        action="PRODUCT_DELETED",
        metadata={"product_id": str(product["_id"])},
    )
    logger.info("PRODUCT_DELETED seller=%s product=%s", product["sellerId"], product["_id"])

    return {"message": "Product deleted successfully"}
