"""
Request authorization.

Every protected route resolves its caller through these dependencies:
cookie -> verified token -> stored user -> role gate -> seller record ->
owned product. The role is always read from the stored user; the role
inside the token is ignored, so a freshly promoted seller does not need to
log in again.
"""

from fastapi import Depends, Request

from config.constants import TOKEN_COOKIE_NAME, ROLE_SELLER
from utils.context import AppContext, get_context
from utils.errors import Unauthorized, Forbidden, NotFound
from utils.jwt import TokenError


async def _resolve_user(token: str | None, ctx: AppContext):
    if not token:
        raise Unauthorized()

    try:
        subject_id, _ = ctx.tokens.verify(token)
    except TokenError:
        raise Unauthorized()

    user = await ctx.users.find_by_id(subject_id)
    if not user:
        raise Unauthorized("User not found")

    return user


async def get_current_user(
    request: Request,
    ctx: AppContext = Depends(get_context),
):
    return await _resolve_user(request.cookies.get(TOKEN_COOKIE_NAME), ctx)


async def get_optional_user(
    request: Request,
    ctx: AppContext = Depends(get_context),
):
    # public reads degrade to anonymous instead of failing
    try:
        return await _resolve_user(request.cookies.get(TOKEN_COOKIE_NAME), ctx)
    except Unauthorized:
        return None


async def get_current_seller(user=Depends(get_current_user)):
    if user.get("role") != ROLE_SELLER:
        raise Forbidden("Access denied")
    return user


async def get_seller_record(
    user=Depends(get_current_seller),
    ctx: AppContext = Depends(get_context),
):
    seller = await ctx.sellers.find_by_user(user["_id"])
    if not seller:
        raise NotFound("Seller not found")
    return seller


async def get_owned_product(
    product_id: str,
    request: Request,
    seller=Depends(get_seller_record),
    ctx: AppContext = Depends(get_context),
):
    product = await ctx.products.find_by_id(product_id)
    if not product:
        raise NotFound("Product not found")

    # ownership comes from the stored seller, never from the request body
    if product.get("sellerId") != seller["_id"]:
        action = "delete" if request.method == "DELETE" else "update"
        raise Forbidden(f"You cannot {action} this product")

    return product
