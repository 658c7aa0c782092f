"""
Canonical product record.
Everything that reads or writes the catalog depends on this shape.
"""
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple


# Wire (camelCase) name -> attribute name
WIRE_FIELDS: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "price": "price",
    "discountPercentage": "discount_percentage",
    "rating": "rating",
    "stock": "stock",
    "brand": "brand",
    "category": "category",
    "thumbnail": "thumbnail",
    "images": "images",
}

REQUIRED_FIELDS = ("id", "title", "price")

_STRING_FIELDS = ("title", "description", "brand", "category", "thumbnail")
_NUMBER_FIELDS = ("price", "discount_percentage", "rating")
_INTEGER_FIELDS = ("id", "stock")


def attribute_name(name: str) -> Optional[str]:
    """Resolve a wire or attribute field name to the attribute name."""
    if name in WIRE_FIELDS:
        return WIRE_FIELDS[name]
    if name in WIRE_FIELDS.values():
        return name
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Product:
    """
    A single catalog entry.

    Only id, title and price are required; the upstream catalog leaves
    brand out for some categories and user drafts carry a subset of fields.
    """
    id: int
    title: str
    price: float
    description: str = ""
    discount_percentage: float = 0
    rating: float = 0
    stock: int = 0
    brand: str = ""
    category: str = ""
    thumbnail: str = ""
    images: Tuple[str, ...] = field(default_factory=tuple)

    def problems(self) -> List[str]:
        """Return every rule this record breaks, empty when valid."""
        errors = []
        for name in _INTEGER_FIELDS:
            if not _is_integer(getattr(self, name)):
                errors.append(f"{name} must be an integer")
        for name in _NUMBER_FIELDS:
            if not _is_number(getattr(self, name)):
                errors.append(f"{name} must be a number")
        for name in _STRING_FIELDS:
            if not isinstance(getattr(self, name), str):
                errors.append(f"{name} must be a string")
        if not isinstance(self.images, tuple) or not all(isinstance(i, str) for i in self.images):
            errors.append("images must be a sequence of strings")
        if errors:
            return errors

        if not self.title.strip():
            errors.append("title must not be empty")
        if self.price < 0:
            errors.append("price must not be negative")
        if not 0 <= self.discount_percentage <= 100:
            errors.append("discount_percentage must be between 0 and 100")
        if not 0 <= self.rating <= 5:
            errors.append("rating must be between 0 and 5")
        if self.stock < 0:
            errors.append("stock must not be negative")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.problems()

    @property
    def discounted_price(self) -> float:
        return round(self.price * (1 - self.discount_percentage / 100), 2)

    def merged(self, **changes) -> "Product":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """
        Build a product from a wire record.

        Unknown keys are ignored. Raises ValueError with a description of
        the first structural problem; callers translate it to their own
        error type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"record is missing required fields: {', '.join(missing)}")

        kwargs = {}
        for wire_name, attr in WIRE_FIELDS.items():
            if wire_name in data:
                kwargs[attr] = data[wire_name]
            elif attr != wire_name and attr in data:
                kwargs[attr] = data[attr]

        if "images" in kwargs:
            images = kwargs["images"]
            if not isinstance(images, (list, tuple)):
                raise ValueError("images must be a list")
            kwargs["images"] = tuple(images)

        product = cls(**kwargs)
        problems = product.problems()
        if problems:
            raise ValueError(f"product {data.get('id')!r}: {'; '.join(problems)}")
        return product

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "discountPercentage": self.discount_percentage,
            "rating": self.rating,
            "stock": self.stock,
            "brand": self.brand,
            "category": self.category,
            "thumbnail": self.thumbnail,
            "images": list(self.images),
        }


# The full ordered catalog; replaced wholesale, never mutated
Snapshot = Tuple[Product, ...]

SORTABLE_FIELDS = tuple(f.name for f in fields(Product))


def snapshot_from_records(records: Any) -> Snapshot:
    """
    Validate a decoded JSON array into a snapshot.

    Raises ValueError when the payload is not a list, a record is malformed,
    or two records share an id.
    """
    if not isinstance(records, list):
        raise ValueError(f"expected a list of products, got {type(records).__name__}")

    products = []
    seen = set()
    for index, record in enumerate(records):
        try:
            product = Product.from_dict(record)
        except (TypeError, ValueError) as e:
            raise ValueError(f"record {index}: {e}") from e
        if product.id in seen:
            raise ValueError(f"duplicate product id {product.id}")
        seen.add(product.id)
        products.append(product)
    return tuple(products)


def snapshot_to_records(snapshot: Snapshot) -> List[Dict[str, Any]]:
    return [product.to_dict() for product in snapshot]
