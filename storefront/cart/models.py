"""Cart models and the normalization rules shared by every read and write path."""
import json
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Iterable, Iterator, Mapping, Optional

# Upper bound applied when add_line increments an existing line
MAX_LINE_QUANTITY = 999


def _get(raw: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style object."""
    if raw is None:
        return default
    if isinstance(raw, Mapping):
        return raw.get(name, default)
    return getattr(raw, name, default)


def to_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce numbers, numeric strings and Decimals to a finite float.

    Anything else (None, garbage strings, NaN, infinities) yields `default`.
    """
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


def normalize_id(value: Any) -> str:
    """Product ids arrive as ints from the API and as strings from storage."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_price(value: Any) -> float:
    price = to_number(value)
    return price if price > 0 else 0.0


def normalize_quantity(value: Any, default: int = 0) -> int:
    # fractional quantities truncate toward zero
    return int(to_number(value, default))


@dataclass
class CartLine:
    """Single product row in the cart."""
    id: str
    name: str = ""
    price: float = 0.0
    quantity: int = 0
    image: str = ""

    @property
    def line_total(self) -> float:
        """Price for all units of this line."""
        return self.price * self.quantity

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        return asdict(self)

    @classmethod
    def from_raw(cls, raw: Any) -> "CartLine":
        """Build a normalized line from any line-like mapping or object."""
        name = _get(raw, "name")
        image = _get(raw, "image")
        return cls(
            id=normalize_id(_get(raw, "id")),
            name=str(name) if name else "",
            price=normalize_price(_get(raw, "price")),
            quantity=normalize_quantity(_get(raw, "quantity")),
            image=str(image) if image else "",
        )


def normalize_lines(raw: Any) -> list[CartLine]:
    """
    Normalize a raw cart into the canonical line list.

    Lines whose quantity is not positive are dropped and duplicate ids are
    folded into their first occurrence by summing quantities. Running the
    result through again returns equal lines.
    """
    if isinstance(raw, Cart):
        raw = raw.lines
    if raw is None or isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        return []

    lines: list[CartLine] = []
    by_id: dict[str, CartLine] = {}
    for item in raw:
        line = CartLine.from_raw(item)
        if line.quantity <= 0:
            continue
        existing = by_id.get(line.id)
        if existing is not None:
            existing.quantity += line.quantity
            continue
        by_id[line.id] = line
        lines.append(line)
    return lines


@dataclass
class Cart:
    """Shopping cart: ordered product lines, at most one per id."""
    lines: list[CartLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    @property
    def count(self) -> int:
        """Total number of units in cart."""
        return sum(line.quantity for line in self.lines)

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, product_id: Any) -> Optional[CartLine]:
        """Find a line by product id (compared after id normalization)."""
        pid = normalize_id(product_id)
        return next((line for line in self.lines if line.id == pid), None)

    def copy(self) -> "Cart":
        return Cart(lines=[CartLine(**line.to_dict()) for line in self.lines])

    def to_list(self) -> list[dict]:
        """Convert to the list persisted in storage."""
        return [line.to_dict() for line in self.lines]

    @classmethod
    def from_list(cls, data: Any) -> "Cart":
        """Create a normalized cart from raw (possibly malformed) data."""
        return cls(lines=normalize_lines(data))


def encode_cart(cart: Cart) -> str:
    """Serialize a cart to the JSON array stored under the cart key."""
    return json.dumps(cart.to_list())


def decode_cart(value: Optional[str]) -> Cart:
    """
    Parse a stored cart blob.

    A missing blob is an empty cart. Malformed JSON raises ValueError
    (json.JSONDecodeError); callers decide how to degrade.
    """
    if not value:
        return Cart()
    return Cart.from_list(json.loads(value))
