"""Bundled reference catalogs for merchant categories and HSA/FSA products."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MerchantCategoryRecord:
    code: str
    description: str
    eligible: bool


@dataclass(frozen=True)
class ProductRecord:
    id: str
    sku: str
    upc: str
    name: str
    category: str
    eligible: bool
    needs_lmn: bool
    description: str


MERCHANT_CATEGORIES: tuple[MerchantCategoryRecord, ...] = (
    MerchantCategoryRecord(code="5912", description="Drug Stores and Pharmacies", eligible=True),
    MerchantCategoryRecord(code="8011", description="Doctors and Physicians", eligible=True),
    MerchantCategoryRecord(code="8021", description="Dentists and Orthodontists", eligible=True),
    MerchantCategoryRecord(code="8062", description="Hospitals", eligible=True),
)

PRODUCTS: tuple[ProductRecord, ...] = (
    ProductRecord(
        id="product-001",
        sku="1001",
        upc="10011001",
        name="Blood Pressure Monitor",
        category="Medical Devices",
        eligible=True,
        needs_lmn=True,
        description="Mat designed for acupressure therapy to relieve stress and pain.",
    ),
    ProductRecord(
        id="product-002",
        sku="1002",
        upc="10021002",
        name="First Aid Kit",
        category="Medical Supplies",
        eligible=True,
        needs_lmn=False,
        description="Comprehensive kit for minor injuries and emergencies.",
    ),
    ProductRecord(
        id="product-003",
        sku="1003",
        upc="10031003",
        name="Therapeutic Massager",
        category="Wellness",
        eligible=True,
        needs_lmn=False,
        description="Handheld device for muscle relaxation and pain relief.",
    ),
)


@dataclass(frozen=True)
class Catalogs:
    merchant_categories: tuple[MerchantCategoryRecord, ...]
    products: tuple[ProductRecord, ...]

    def find_merchant_category(self, code: str) -> MerchantCategoryRecord | None:
        """Return the first merchant category with the given code."""
        for record in self.merchant_categories:
            if record.code == code:
                return record
        return None

    def find_product(self, sku: str | None, upc: str | None) -> ProductRecord | None:
        """Return the first product whose SKU or UPC matches, in catalog order.

        A missing identifier never matches.
        """
        for record in self.products:
            if (sku is not None and record.sku == sku) or (upc is not None and record.upc == upc):
                return record
        return None


DEFAULT_CATALOGS = Catalogs(merchant_categories=MERCHANT_CATEGORIES, products=PRODUCTS)
