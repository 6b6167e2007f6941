"""
Product Domain Model

Represents a catalog product as ingested from the external feed.
Products are a tagged union over unit_of_measurement:

- CountProduct: sold by the unit, cart quantity is a positive integer
- AreaProduct: priced per area, sold in packages covering `coefficient` area each

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict, TypeAdapter
from typing import Annotated, Dict, Literal, Optional, Tuple, Union
from decimal import Decimal, getcontext, localcontext


PLACEHOLDER_PHOTO_URL = "https://images.pexels.com/photos/162553/keys-workshop-mechanic-tools-162553.jpeg"


class BaseProduct(BaseModel):
    """
    Fields shared by every product variant

    Fields:
        sku: Stock Keeping Unit (unique identifier)
        name: Product name
        category: Product category (optional)
        unit_price: List price, parsed from the feed's decimal string
        photo_urls: Ordered image URLs
        branch_stock: Units in stock per branch (optional)
    """

    sku: str = Field(..., min_length=1, description="Stock Keeping Unit")
    name: str = Field("", description="Product name")
    category: Optional[str] = Field(None, description="Product category")
    unit_price: Decimal = Field(Decimal("0"), ge=0, description="List price")
    photo_urls: Tuple[str, ...] = Field((), description="Image URLs in display order")
    branch_stock: Optional[Dict[str, int]] = Field(None, description="Stock per branch")

    # Fetched products are never written back to the source
    model_config = ConfigDict(frozen=True)

    @property
    def primary_photo_url(self) -> str:
        """First photo, or the placeholder image when the product has none"""
        return self.photo_urls[0] if self.photo_urls else PLACEHOLDER_PHOTO_URL

    @property
    def total_stock(self) -> Optional[int]:
        if self.branch_stock is None:
            return None
        return sum(self.branch_stock.values())

    def to_dict(self) -> dict:
        """
        Convert to dictionary for API responses

        Decimals become floats for JSON compatibility.
        """
        data = self.model_dump()
        data['photo_urls'] = list(self.photo_urls)
        data['primary_photo_url'] = self.primary_photo_url
        data['total_stock'] = self.total_stock
        data['unit_price'] = float(self.unit_price)
        if data.get('coefficient') is not None:
            data['coefficient'] = float(data['coefficient'])
        return data


class CountProduct(BaseProduct):
    """Product sold by the unit"""
    unit_of_measurement: Literal["count"] = "count"


class AreaProduct(BaseProduct):
    """Product priced per area and sold in whole packages"""
    unit_of_measurement: Literal["area"] = "area"
    coefficient: Decimal = Field(..., gt=0, description="Area covered by one package")


Product = Annotated[
    Union[CountProduct, AreaProduct],
    Field(discriminator="unit_of_measurement"),
]

# Validates serialized products (e.g. from cart storage) back into the right variant
product_adapter = TypeAdapter(Product)


def is_area_product(product: BaseProduct) -> bool:
    return isinstance(product, AreaProduct)


# Upper bound on packages (units, for count products) in a single cart line
MAX_PACKAGES = 10 ** 9


def exceeds_package_limit(quantity: Decimal, coefficient: Decimal) -> bool:
    """Cheap magnitude check: True when quantity / coefficient is surely above MAX_PACKAGES"""
    return quantity.adjusted() - coefficient.adjusted() > len(str(MAX_PACKAGES))


def package_context(quantity: Decimal, coefficient: Decimal):
    """
    Decimal context in which quantity // coefficient, quantity % coefficient
    and (quotient + 1) * coefficient are all exact

    The integer quotient must fit in the precision, and multiplying it back
    needs room for the coefficient's digits too.
    """
    context = getcontext().copy()
    needed = (max(0, quantity.adjusted() - coefficient.adjusted()) + 2
              + len(coefficient.as_tuple().digits) + 1)
    context.prec = max(context.prec, needed)
    return localcontext(context)
