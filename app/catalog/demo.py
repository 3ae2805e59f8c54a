"""Seed catalog used when no stored data can be recovered."""

from .models import Catalog, Product, SubProduct


def demo_catalog() -> Catalog:
    """
    One product with two variants. The second variant has an empty name
    and description so it displays with the parent's values.
    """
    return (
        Product(
            id="1",
            name="Royal Velvet Sofa",
            category="Furniture",
            description="Premium black velvet sofa with gold trim.",
            base_price=1200,
            image="https://images.unsplash.com/photo-1555041469-a586c61ea9bc?auto=format&fit=crop&q=80&w=400",
            remarks="Flagship product",
            alert_limit=5,
            sub_products=(
                SubProduct(
                    id="1-1",
                    sku="RVS-BLK-3S",
                    name="Royal Velvet Sofa (Midnight)",
                    description="3-Seater midnight black",
                    color="Midnight Black",
                    price=1200,
                    quantity=12,
                    weight="45kg",
                    dimensions="200x90x85cm",
                    image="https://images.unsplash.com/photo-1550226891-ef816aed4a98?auto=format&fit=crop&q=80&w=200",
                ),
                SubProduct(
                    id="1-2",
                    sku="RVS-GLD-3S",
                    name="",
                    description="",
                    color="Royal Gold",
                    price=1350,
                    quantity=4,
                    weight="45kg",
                    dimensions="200x90x85cm",
                    image="https://images.unsplash.com/photo-1555041469-a586c61ea9bc?auto=format&fit=crop&q=80&w=200",
                ),
            ),
        ),
    )
