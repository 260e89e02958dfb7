import logging

from fastapi import APIRouter, Depends, Form, File, UploadFile

from config.constants import ROLE_SELLER
from models.seller import ShopDetails
from utils.audit import log_audit
from utils.context import AppContext, get_context
from utils.errors import Conflict
from utils.security import get_current_user, get_seller_record
from utils.sellers import SellerAlreadyExists
from utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/seller",
    tags=["Seller"]
)


async def _finish_promotion(ctx: AppContext, user: dict) -> None:
    # a shop without the seller role means an earlier registration stopped
    # between the insert and the promotion
    if user.get("role") != ROLE_SELLER:
        logger.warning("SELLER_ROLE_REPAIRED user=%s", user["_id"])
        await ctx.users.set_role(user["_id"], ROLE_SELLER)


# ----------------------------------------
# REGISTER SHOP (customer -> seller)
# ----------------------------------------

@router.post("/register")
async def register_seller(
    shopName: str = Form(..., min_length=1),
    shopType: str = Form(..., min_length=1),
    shopLocation: str | None = Form(None),
    shopPhoto: UploadFile | None = File(None),
    user=Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    # cheap early exit so a repeat request does not upload a photo for nothing
    if await ctx.sellers.find_by_user(user["_id"]):
        await _finish_promotion(ctx, user)
        raise Conflict("You are already a seller")

    photo_url = None
    if shopPhoto is not None and shopPhoto.filename:
        photo_url = await ctx.relay.store(shopPhoto)

    shop = ShopDetails(
        shopName=shopName,
        shopType=shopType,
        shopLocation=shopLocation,
        shopPhoto=photo_url,
    )

    # the unique index on userId settles concurrent registrations
    try:
        seller = await ctx.sellers.insert(user, shop)
    except SellerAlreadyExists:
        await _finish_promotion(ctx, user)
        raise Conflict("You are already a seller")

    await ctx.users.set_role(user["_id"], ROLE_SELLER)

    await log_audit(
        ctx.db,
        actor_id=str(user["_id"]),
        actor_role=ROLE_SELLER,
        action="SELLER_REGISTERED",
        metadata={
            "seller_id": str(seller["_id"]),
            "shop_name": shop.shopName,
        },
    )
    logger.info("SELLER_REGISTERED user=%s seller=%s", user["_id"], seller["_id"])

    return {
        "message": "Seller registered successfully",
        "seller": serialize_doc(seller),
    }


# ----------------------------------------
# SELLER PROFILE
# ----------------------------------------

@router.get("/me")
async def seller_me(seller=Depends(get_seller_record)):
    return {"seller": serialize_doc(seller)}
