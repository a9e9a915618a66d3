"""Cart totals shown on the cart and checkout pages."""
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.cart.models import Cart, CartLine
from .money import multiply, round_money, to_decimal, to_float


@dataclass(frozen=True)
class ShippingPolicy:
    """Flat shipping fee, waived when the subtotal exceeds a threshold."""
    free_threshold: Decimal = Decimal("500")
    flat_fee: Decimal = Decimal("99")

    def shipping_for(self, subtotal: Decimal, is_empty: bool = False) -> Decimal:
        if is_empty or subtotal > to_decimal(self.free_threshold):
            return Decimal("0")
        return to_decimal(self.flat_fee)


DEFAULT_SHIPPING = ShippingPolicy()


@dataclass
class CartSummary:
    """Cart lines with money totals."""
    lines: list[CartLine] = field(default_factory=list)
    count: int = 0
    subtotal: float = 0.0
    shipping: float = 0.0
    total: float = 0.0

    def to_dict(self) -> dict:
        return {
            "items": [
                {**line.to_dict(), "line_total": to_float(round_money(multiply(line.price, line.quantity)))}
                for line in self.lines
            ],
            "count": self.count,
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "total": self.total,
        }


def summarize_cart(cart: Cart, shipping: ShippingPolicy = DEFAULT_SHIPPING) -> CartSummary:
    """Compute subtotal, shipping and total for a cart."""
    subtotal = sum((multiply(line.price, line.quantity) for line in cart.lines), Decimal("0"))
    shipping_fee = shipping.shipping_for(subtotal, is_empty=cart.is_empty)
    return CartSummary(
        lines=cart.copy().lines,
        count=cart.count,
        subtotal=to_float(round_money(subtotal)),
        shipping=to_float(round_money(shipping_fee)),
        total=to_float(round_money(subtotal + shipping_fee)),
    )
