import pytest

from fin_assistant.catalog import CuratedCatalog
from fin_assistant.classifier import LocalClassifier
from fin_assistant.models import Product, ProductVariant
from fin_assistant.recommender import ProductSearchService


@pytest.fixture
def curated_catalog():
    return CuratedCatalog()


@pytest.fixture
def search_service(curated_catalog):
    return ProductSearchService(curated_catalog)


@pytest.fixture
def local_classifier(search_service):
    return LocalClassifier(search_service)


@pytest.fixture
def make_product():
    """Factory for small hand-built catalogs."""

    def _make(id, name, subcategory, price=50.0, colors=(), description="", brand="Test Brand"):
        variants = (ProductVariant(type="color", options=tuple(colors)),) if colors else ()
        return Product(
            id=id,
            name=name,
            price=price,
            currency="USD",
            image=f"/img/{id}.jpg",
            rating=4.0,
            review_count=10,
            description=description,
            category="clothing",
            subcategory=subcategory,
            brand=brand,
            variants=variants,
        )

    return _make


FEED_HEADER = "url,name,size,category,price,color,sku,description,images\n"


@pytest.fixture
def feed_text():
    """A small ASOS-style export: two keepers and one row for each rejection rule."""
    rows = [
        # kept: t-shirt, ASOS DESIGN
        'https://www.asos.com/p/1,ASOS DESIGN oversized t-shirt in black,"S,M,L - Out of stock",T-Shirts,25.00,Black,101,'
        "\"[{'Product Details': 'T-Shirt by ASOS DESIGNRegular fitCrew neckProduct Code: 12345'}]\","
        "\"['https://images.asos-media.com/products/asos-design-tee/1-1?$n_640w$', "
        "'https://images.asos-media.com/products/asos-design-tee/1-2']\"",
        # duplicate name, different case
        "https://www.asos.com/p/2,ASOS DESIGN Oversized T-Shirt in Black,M,T-Shirts,20.00,Black,102,,"
        "\"['https://images.asos-media.com/products/other-tee/2-1']\"",
        # duplicate image once the query string is stripped
        "https://www.asos.com/p/3,ASOS DESIGN relaxed t-shirt in white,M,T-Shirts,22.00,White,103,,"
        "\"['https://images.asos-media.com/products/asos-design-tee/1-1?$XXL$']\"",
        # excluded by the content-safety list
        "https://www.asos.com/p/4,ASOS DESIGN bikini top in red,S,Swim,15.00,Red,104,,"
        "\"['https://images.asos-media.com/products/bikini/4-1']\"",
        # price out of range
        "https://www.asos.com/p/5,Barbour waxed jacket in olive,L,Jackets,2500.00,Olive,105,,"
        "\"['https://images.asos-media.com/products/barbour/5-1']\"",
        "https://www.asos.com/p/6,ASOS DESIGN free tote bag in beige,,Bags,0,Beige,106,,"
        "\"['https://images.asos-media.com/products/tote/6-1']\"",
        "https://www.asos.com/p/7,ASOS DESIGN puffer jacket in navy,L,Jackets,n/a,Navy,107,,"
        "\"['https://images.asos-media.com/products/puffer/7-1']\"",
        # name too short
        "https://www.asos.com/p/8,Hat,,Hats,10.00,Black,108,,"
        "\"['https://images.asos-media.com/products/hat/8-1']\"",
        # no recognizable subcategory
        "https://www.asos.com/p/9,ASOS DESIGN umbrella in clear,,Accessories,12.00,Clear,109,,"
        "\"['https://images.asos-media.com/products/umbrella/9-1']\"",
        # no image
        "https://www.asos.com/p/10,ASOS DESIGN cargo trousers in khaki,M,Trousers,30.00,Khaki,110,,",
        # kept: trainers, Nike
        "https://www.asos.com/p/11,Nike Air Max trainers in white,\"8,9,10\",Trainers,120.00,White,111,,"
        "\"['https://images.asos-media.com/products/nike-air-max/11-1']\"",
        "",
    ]
    return FEED_HEADER + "\n".join(rows)
