"""
Domain exceptions shared by services and API routers
"""


class CatalogSourceError(Exception):
    """A catalog page could not be fetched or parsed. Fatal for the whole load."""


class InvalidCartOperation(ValueError):
    """Cart operation not valid for this product type"""


class DiscountUpdateError(Exception):
    """Admin update of the global discount failed"""
