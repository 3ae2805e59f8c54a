"""
==============================================================================
Command Interpreter Module
==============================================================================

Turns a free-text inventory command into a catalog mutation.

An external classifier maps the transcript to a structured intent; this
module validates that intent into a tagged union and resolves it against
the in-memory catalog with case-insensitive substring matching (voice
transcripts are noisy, so exact matching is never used).

Intents:
-------
- CREATE_PRODUCT: append a product built from the supplied fields
- UPDATE_STOCK: add ``quantityChange`` to every matching variant
- UNKNOWN: report the classifier's reason; no mutation

UPDATE_STOCK Matching:
---------------------
1. Products whose name, or any variant name, contains ``productName``
2. Within each, variants where the SKU equals ``sku``, the color contains
   ``color``, or the variant name contains ``productName``
3. With none of sku/color/productName given, every variant of every
   matched product is updated

Stock quantities are not clamped here. The storage boundary clamps at zero.
Price and alert limit of a created product are floored at zero.

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import Field, TypeAdapter, ValidationError

from app.catalog.models import Catalog, CatalogModel, Product, SubProduct
from app.core import exceptions

if TYPE_CHECKING:
    from app.services.catalog_store import CatalogStore
    from app.services.classifier import IntentClassifier


# Module logger
logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "New Product"
DEFAULT_CATEGORY = "General"
DEFAULT_ALERT_LIMIT = 10


class ActionType(str, Enum):
    """Intent tags produced by the classifier."""

    CREATE_PRODUCT = "CREATE_PRODUCT"
    UPDATE_STOCK = "UPDATE_STOCK"
    UNKNOWN = "UNKNOWN"


# =============================================================================
# INTENTS
# =============================================================================


class ProductDraft(CatalogModel):
    """Whatever product fields the classifier managed to extract."""

    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[float] = None
    remarks: Optional[str] = None
    alert_limit: Optional[int] = None


class CreateProductIntent(CatalogModel):
    type: Literal["CREATE_PRODUCT"] = "CREATE_PRODUCT"
    product_name: Optional[str] = None
    data: ProductDraft = Field(default_factory=ProductDraft)


class UpdateStockIntent(CatalogModel):
    type: Literal["UPDATE_STOCK"] = "UPDATE_STOCK"
    product_name: Optional[str] = None
    sku: Optional[str] = None
    color: Optional[str] = None
    quantity_change: Optional[int] = 0


class UnknownIntent(CatalogModel):
    type: Literal["UNKNOWN"] = "UNKNOWN"
    reason: str = ""


Intent = Annotated[
    Union[CreateProductIntent, UpdateStockIntent, UnknownIntent],
    Field(discriminator="type"),
]

_intent_adapter = TypeAdapter(Intent)


def parse_intent(raw: Any) -> Intent:
    """
    Validate a raw classifier result into an intent.

    Unrecognized tags and malformed payloads become UnknownIntent; an
    UNKNOWN result keeps the classifier's reason.
    """
    if not isinstance(raw, dict):
        return UnknownIntent(reason="Unsupported action type")

    tag = str(raw.get("type") or "").upper()
    if tag not in ActionType.__members__:
        logger.warning(f"Rejected intent with tag {raw.get('type')!r}")
        return UnknownIntent(reason="Unsupported action type")

    try:
        payload = {k: v for k, v in raw.items() if v is not None}
        return _intent_adapter.validate_python({**payload, "type": tag})
    except ValidationError as e:
        logger.warning(f"Malformed {tag} intent: {e.error_count()} errors")
        return UnknownIntent(reason="Unsupported action type")


# =============================================================================
# RESOLUTION
# =============================================================================


@dataclass(frozen=True)
class CommandOutcome:
    """Result of applying one intent."""

    products: Catalog
    success: bool
    message: str


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _create_product(products: Catalog, intent: CreateProductIntent, placeholder_image: str) -> CommandOutcome:
    draft = intent.data
    product = Product(
        id=str(uuid4()),
        name=draft.name or intent.product_name or DEFAULT_PRODUCT_NAME,
        category=draft.category or DEFAULT_CATEGORY,
        description=draft.description or "",
        base_price=max(0.0, draft.base_price or 0),
        image=placeholder_image,
        remarks=draft.remarks or "",
        alert_limit=max(0, draft.alert_limit or DEFAULT_ALERT_LIMIT),
    )
    return CommandOutcome(products + (product,), True, f"Created product: {product.name}")


def _variant_matches(variant: SubProduct, intent: UpdateStockIntent) -> bool:
    if not intent.sku and not intent.color and not intent.product_name:
        return True
    if intent.sku and variant.sku.lower() == intent.sku.lower():
        return True
    if intent.color and _contains(variant.color, intent.color):
        return True
    return bool(intent.product_name) and _contains(variant.name, intent.product_name)


def _update_stock(products: Catalog, intent: UpdateStockIntent, transcript: str) -> CommandOutcome:
    target = intent.product_name or ""
    updated = False
    next_products = []

    for product in products:
        name_match = _contains(product.name, target) or any(
            _contains(v.name, target) for v in product.sub_products
        )
        if not name_match:
            next_products.append(product)
            continue

        variants = []
        for variant in product.sub_products:
            if _variant_matches(variant, intent):
                updated = True
                variant = variant.model_copy(
                    update={"quantity": variant.quantity + (intent.quantity_change or 0)}
                )
            variants.append(variant)
        next_products.append(product.model_copy(update={"sub_products": tuple(variants)}))

    if not updated:
        return CommandOutcome(products, False, "Could not find matching product/variant to update.")
    return CommandOutcome(tuple(next_products), True, f'Stock updated based on: "{transcript}"')


def apply_intent(
    products: Catalog,
    intent: Intent,
    transcript: str = "",
    placeholder_image: str = "",
) -> CommandOutcome:
    """
    Resolve ``intent`` against ``products``.

    Failures return the input catalog unchanged.

    Raises:
        TypeError: If ``intent`` is not a known intent type
    """
    if isinstance(intent, CreateProductIntent):
        return _create_product(products, intent, placeholder_image)
    if isinstance(intent, UpdateStockIntent):
        return _update_stock(products, intent, transcript)
    if isinstance(intent, UnknownIntent):
        return CommandOutcome(products, False, f'Could not understand: "{transcript}". {intent.reason}'.strip())
    raise TypeError(f"Unhandled intent: {type(intent).__name__}")


def summarize_catalog(products: Catalog) -> str:
    """Context passed to the classifier: ``Name (Category)`` per product."""
    return ", ".join(f"{p.name} ({p.category})" for p in products)


# =============================================================================
# INTERPRETER
# =============================================================================


class CommandInterpreter:
    """
    Classifies a transcript and applies the result through the catalog store.

    Args:
        store: Catalog owner the mutation is published to
        classifier: Natural-language intent classifier
        placeholder_image: Image URI for products created by voice
    """

    def __init__(
        self,
        store: "CatalogStore",
        classifier: "IntentClassifier",
        placeholder_image: str = "",
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._placeholder_image = placeholder_image

    async def handle(self, transcript: str) -> CommandOutcome:
        """
        Process one transcript.

        Raises:
            AppException: COMMAND_NOT_UNDERSTOOD or NO_MATCHING_VARIANT
        """
        transcript = (transcript or "").strip()
        if not transcript:
            raise exceptions.command_not_understood(transcript, "Empty command")

        intent = await self._classifier.classify(transcript, summarize_catalog(self._store.products))
        logger.info(f"Command {transcript!r} classified as {intent.type}")

        if isinstance(intent, UnknownIntent):
            raise exceptions.command_not_understood(transcript, intent.reason)

        outcome = apply_intent(
            self._store.products, intent, transcript, self._placeholder_image
        )
        if not outcome.success:
            raise exceptions.no_matching_variant(transcript)

        state = self._store.replace_products(outcome.products)
        return CommandOutcome(state.products, True, outcome.message)
