"""
Cart API Router

Session-scoped cart endpoints for the storefront front end.
Every mutation returns the updated cart with totals.

Cart handlers are plain `def`: the Upstash client is synchronous, so
FastAPI runs them in its threadpool.
"""
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.cart import CartStore
from storefront.errors import ERROR_ORDER_FAILED, ApiError, CheckoutError
from storefront.logging import get_session_logger
from storefront.services.checkout import CheckoutForm, OrderClient, place_order
from .deps import get_order_client, get_store

router = APIRouter(prefix="/api/cart/{session_id}", tags=["cart"])


# ==================== PYDANTIC MODELS ====================

class ProductImage(BaseModel):
    image: Optional[str] = None
    # older catalog responses nest the path under "images"
    images: Optional[str] = None


class AddItemRequest(BaseModel):
    id: Union[int, str]
    name: Optional[str] = None
    price: Optional[Union[float, str]] = None
    image: Optional[str] = None
    images: list[ProductImage] = []
    quantity: Any = 1


class UpdateQuantityRequest(BaseModel):
    quantity: Any


# ==================== CART ====================

@router.get("")
def get_cart(store: CartStore = Depends(get_store)):
    """Get cart lines with subtotal, shipping and total"""
    return store.summary().to_dict()


@router.get("/count")
def get_cart_count(store: CartStore = Depends(get_store)):
    """Get total units in cart (header badge)"""
    return {"count": store.count()}


@router.post("/items")
def add_cart_item(request: AddItemRequest, store: CartStore = Depends(get_store)):
    """Add product to cart"""
    product = request.model_dump(exclude={"quantity"})
    store.add_line(product, request.quantity)
    return store.summary().to_dict()


@router.patch("/items/{product_id}")
def update_cart_item(
    product_id: str,
    request: UpdateQuantityRequest,
    store: CartStore = Depends(get_store),
):
    """Set quantity of a cart line (0 or less removes it)"""
    store.set_quantity(product_id, request.quantity)
    return store.summary().to_dict()


@router.delete("/items/{product_id}")
def remove_cart_item(product_id: str, store: CartStore = Depends(get_store)):
    """Remove product from cart"""
    store.remove_line(product_id)
    return store.summary().to_dict()


@router.delete("")
def clear_cart(store: CartStore = Depends(get_store)):
    """Clear the entire cart"""
    store.clear()
    return store.summary().to_dict()


# ==================== CHECKOUT ====================

@router.post("/checkout")
async def checkout(
    session_id: str,
    form: CheckoutForm,
    store: CartStore = Depends(get_store),
    client: OrderClient = Depends(get_order_client),
):
    """Place an order for the cart and clear it"""
    try:
        confirmation = await place_order(store, form, client)
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ApiError as e:
        get_session_logger(__name__, session_id).error(f"Checkout failed: {e}")
        raise HTTPException(status_code=502, detail=ERROR_ORDER_FAILED)

    return {
        "order_id": confirmation.order_id,
        "items": [line.to_dict() for line in confirmation.items],
        "total_amount": confirmation.total_amount,
    }
