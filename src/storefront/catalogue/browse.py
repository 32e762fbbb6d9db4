"""Read-side queries over the catalogue: filtered listing and related products."""

import math

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, ProductStatus

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
RELATED_LIMIT = 8


def _active_products(**filters) -> list[Product]:
    repo = current_domain.repository_for(Product)
    return list(repo._dao.query.filter(status=ProductStatus.ACTIVE.value, **filters).all().items)


def browse_products(
    search=None,
    category=None,
    subcategory=None,
    gender=None,
    age=None,
    season=None,
    newest=False,
    trending=False,
    page=1,
    limit=DEFAULT_PAGE_SIZE,
) -> dict:
    """Return one page of active products matching every supplied filter.

    ``newest``/``trending`` restrict to flagged products and sort newest
    first; otherwise products are listed by name. ``search`` is a
    case-insensitive match on the product name.
    """
    page = max(1, int(page))
    limit = min(max(1, int(limit)), MAX_PAGE_SIZE)

    filters = {
        key: value
        for key, value in {
            "category": category,
            "subcategory": subcategory,
            "gender": gender,
            "age": age,
            "season": season,
        }.items()
        if value
    }
    if newest:
        filters["is_newest"] = True
    if trending:
        filters["is_trending"] = True

    products = _active_products(**filters)
    if search:
        needle = search.strip().lower()
        products = [p for p in products if needle in p.name.lower()]

    if newest or trending:
        products.sort(key=lambda p: p.created_at, reverse=True)
    else:
        products.sort(key=lambda p: p.name.lower())

    total = len(products)
    start = (page - 1) * limit
    return {
        "products": products[start : start + limit],
        "page": page,
        "pages": math.ceil(total / limit) if total else 0,
        "total": total,
    }


def related_products(product_id, limit=RELATED_LIMIT) -> list[Product]:
    """Same subcategory first, then the rest of the category, then anything else."""
    product = current_domain.repository_for(Product).get(product_id)

    candidates = [p for p in _active_products() if str(p.id) != str(product.id)]
    same_subcategory = [p for p in candidates if p.subcategory == product.subcategory]
    same_category = [
        p for p in candidates if p.category == product.category and p.subcategory != product.subcategory
    ]
    others = [p for p in candidates if p.category != product.category]

    ranked = []
    for group in (same_subcategory, same_category, others):
        ranked.extend(sorted(group, key=lambda p: p.created_at, reverse=True))
    return ranked[:limit]
