"""
Admin Product Management

Catalog maintenance for the admin panel. Products are addressed by slug,
which is what the storefront URLs use.
"""

from typing import List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.admin.schemas import (
    ProductInput,
    ProductRead,
    ProductStatus,
    ProductUpdateResult,
)
from storefront.database.models import Product
from storefront.errors import ProductNotFoundError, SlugTakenError

logger = structlog.get_logger(__name__)


async def _get_by_slug(session: AsyncSession, slug: str) -> Product:
    result = await session.execute(select(Product).where(Product.slug == slug))
    product = result.scalar_one_or_none()
    if product is None:
        raise ProductNotFoundError(slug)
    return product


async def is_slug_taken(session: AsyncSession, slug: str) -> bool:
    """Whether any product already uses ``slug``."""
    result = await session.execute(select(Product.id).where(Product.slug == slug))
    return result.first() is not None


async def list_products(session: AsyncSession) -> List[ProductRead]:
    """All products, active or not, oldest first."""
    result = await session.execute(select(Product).order_by(Product.created_at, Product.id))
    return [ProductRead.model_validate(product) for product in result.scalars().all()]


async def get_product(session: AsyncSession, slug: str) -> ProductRead:
    """
    Raises:
        ProductNotFoundError: If no product has this slug
    """
    return ProductRead.model_validate(await _get_by_slug(session, slug))


async def create_product(session: AsyncSession, data: ProductInput) -> ProductRead:
    """
    Create a product.

    Raises:
        SlugTakenError: If the slug is already in use
    """
    if await is_slug_taken(session, data.slug):
        raise SlugTakenError(data.slug)

    product = Product(**data.model_dump())
    session.add(product)
    await session.flush()
    await session.refresh(product)

    logger.info("Product created", product_id=str(product.id), slug=product.slug)
    return ProductRead.model_validate(product)


async def update_product(session: AsyncSession, slug: str, data: ProductInput) -> ProductUpdateResult:
    """
    Replace the editable fields of the product currently at ``slug``.

    Raises:
        ProductNotFoundError: If no product has this slug
        SlugTakenError: If the new slug belongs to another product
    """
    product = await _get_by_slug(session, slug)

    slug_changed = data.slug != product.slug
    if slug_changed and await is_slug_taken(session, data.slug):
        raise SlugTakenError(data.slug)

    for field, value in data.model_dump().items():
        setattr(product, field, value)

    await session.flush()
    await session.refresh(product)

    logger.info(
        "Product updated",
        product_id=str(product.id),
        slug=product.slug,
        previous_slug=slug if slug_changed else None,
    )
    return ProductUpdateResult(product=ProductRead.model_validate(product), slug_changed=slug_changed)


async def delete_product(session: AsyncSession, slug: str) -> None:
    """
    Delete a product. Order lines keep their copied name and prices.

    Raises:
        ProductNotFoundError: If no product has this slug
    """
    product = await _get_by_slug(session, slug)
    await session.delete(product)
    await session.flush()
    logger.info("Product deleted", product_id=str(product.id), slug=slug)


async def toggle_product_status(session: AsyncSession, slug: str) -> ProductStatus:
    """
    Flip ``is_active``.

    Raises:
        ProductNotFoundError: If no product has this slug
    """
    product = await _get_by_slug(session, slug)
    product.is_active = not product.is_active
    await session.flush()

    logger.info("Product status toggled", slug=slug, is_active=product.is_active)
    return ProductStatus(slug=slug, is_active=product.is_active)
