"""Storefront: an apparel e-commerce backend built on Protean and FastAPI."""
