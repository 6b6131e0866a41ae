"""Curated demo catalog.

Three verticals, one per image aspect ratio:
- portrait (3:4): Gymshark tops & tees
- square (1:1): multi-brand trainers
- landscape (4:3): Kave Home sofas

Images live under /catalog/{ratio}/{slug}-{n}.jpg, n = 1..3, image 1 is the hero.
"""
from typing import Dict, List, Optional, Tuple

from .models import Product, ProductVariant

RATIOS = ("portrait", "square", "landscape")

TRAINER_SIZES = ("7", "8", "9", "10", "11", "12")


def _images(ratio: str, slug: str) -> Tuple[str, ...]:
    return tuple(f"/catalog/{ratio}/{slug}-{n}.jpg" for n in (1, 2, 3))


def _item(
    id: str,
    name: str,
    price: float,
    ratio: str,
    slug: str,
    rating: float,
    review_count: int,
    description: str,
    category: str,
    subcategory: str,
    brand: str,
    colors: Tuple[str, ...],
    sizes: Tuple[str, ...] = (),
    tags: Tuple[str, ...] = (),
) -> Product:
    images = _images(ratio, slug)
    variants: Tuple[ProductVariant, ...] = ()
    if sizes:
        variants += (ProductVariant(type="size", options=sizes),)
    variants += (ProductVariant(type="color", options=colors),)
    return Product(
        id=id,
        name=name,
        price=price,
        currency="USD",
        image=images[0],
        images=images,
        rating=rating,
        review_count=review_count,
        description=description,
        category=category,
        subcategory=subcategory,
        brand=brand,
        in_stock=True,
        variants=variants,
        tags=tags,
    )


def _tee(id, name, price, slug, rating, reviews, description, colors, sizes, tags=(), subcategory="t-shirts"):
    return _item(id, name, price, "portrait", slug, rating, reviews, description,
                 "clothing", subcategory, "Gymshark", colors, sizes, tags)


def _trainer(id, name, price, slug, rating, reviews, description, brand, colors, tags=()):
    return _item(id, name, price, "square", slug, rating, reviews, description,
                 "clothing", "trainers", brand, colors, TRAINER_SIZES, tags)


def _sofa(id, name, price, slug, rating, reviews, description, colors, tags=()):
    return _item(id, name, price, "landscape", slug, rating, reviews, description,
                 "furniture", "sofas", "Kave Home", colors, (), tags)


_PORTRAIT: Tuple[Product, ...] = (
    _tee("gs-1", "Power T-Shirt", 36, "power-tee", 3.7, 482,
         "Oversized fit with sweat-wicking fabric and dropped shoulders. Built for heavy lifting sessions.",
         ("Stealth Blue", "Black", "Impact Burgundy", "White"), ("XS", "S", "M", "L", "XL", "XXL"), ("new",)),
    _tee("gs-2", "Crest T-Shirt", 22, "crest-tee", 4.1, 1247,
         "Regular fit everyday tee with embroidered Gymshark crest logo. Soft-touch cotton blend.",
         ("Black", "White", "Navy", "Light Grey Marl", "Soft Brown"), ("XS", "S", "M", "L", "XL", "XXL"),
         ("bestseller",)),
    _tee("gs-3", "Crest Oversized T-Shirt", 26, "crest-oversized", 4.1, 634,
         "Relaxed oversized fit with the signature crest logo. Dropped shoulders and longer body length.",
         ("Black", "Soft Brown", "White"), ("XS", "S", "M", "L", "XL", "XXL"), ("new",)),
    _tee("gs-4", "Legacy T-Shirt", 28, "legacy-tee", 4.3, 856,
         "Slim fit with a tailored cut that shows off your shape. Lightweight and breathable for intense workouts.",
         ("Black", "Navy", "White", "Light Grey"), ("S", "M", "L", "XL", "XXL")),
    _tee("gs-5", "Geo Seamless T-Shirt", 36, "geo-seamless", 4.5, 723,
         "Seamless knit construction with geometric texture for ventilation. Slim fit, second-skin feel.",
         ("Black/Charcoal Grey", "Navy/Light Blue", "Olive/Khaki"), ("S", "M", "L", "XL"), ("bestseller",)),
    _tee("gs-6", "Oversized Performance T-Shirt", 26, "performance-tee", 4.1, 512,
         "Sweat-wicking oversized tee with mesh back panel for airflow. Perfect for conditioning and cardio.",
         ("Black", "Charcoal", "Light Grey Marl"), ("S", "M", "L", "XL", "XXL")),
    _tee("gs-7", "Lightweight Seamless T-Shirt", 30, "lightweight-seamless", 3.7, 389,
         "Ultra-light seamless knit for unrestricted movement. Subtle stripe texture with sweat-wicking finish.",
         ("Black/Silhouette Grey", "Navy/Blue", "White/Light Grey"), ("S", "M", "L", "XL")),
    _tee("gs-8", "Arrival T-Shirt", 25, "arrival-tee", 4.0, 943,
         "Regular fit gym essential with sweat-wicking fabric. Clean design that works for training and everyday.",
         ("Black", "White", "Navy", "Rust Orange"), ("XS", "S", "M", "L", "XL", "XXL")),
    _tee("gs-9", "Critical Drop Arm Tank", 24, "critical-tank", 4.2, 567,
         "Slim fit tank with deep cut armholes for full range of motion. Ideal for shoulders and arms day.",
         ("Black", "Stealth Blue", "White"), ("S", "M", "L", "XL"), subcategory="tops"),
    _tee("gs-10", "Conditioning Club Oversized Tee", 30, "conditioning-tee", 4.4, 298,
         "Heavyweight oversized tee with bold Conditioning Club graphic. Relaxed fit for rest days and the gym.",
         ("Black", "Off White", "Washed Khaki"), ("S", "M", "L", "XL", "XXL"), ("new",)),
)

_SQUARE: Tuple[Product, ...] = (
    _trainer("tr-1", "Nike Dunk Low Retro", 120, "nike-dunk-low", 4.7, 2834,
             "The court classic reborn. Padded collar, leather upper, and the iconic colour-blocking that started it all.",
             "Nike", ("White/Black", "Grey Fog", "Vintage Green", "Panda"), ("bestseller",)),
    _trainer("tr-2", "Nike Air Force 1 '07", 115, "nike-af1", 4.8, 5621,
             "The one that needs no introduction. Air cushioning, full-grain leather, and the pivoting circle traction pattern.",
             "Nike", ("White/White", "Black/White", "Sail"), ("bestseller",)),
    _trainer("tr-3", "Adidas Samba OG", 110, "adidas-samba", 4.7, 3456,
             "Indoor football heritage turned street icon. Full-grain leather upper with suede T-toe overlay and gum sole.",
             "Adidas", ("White/Black", "Black/White", "Green/Gum"), ("bestseller",)),
    _trainer("tr-4", "Adidas Gazelle", 100, "adidas-gazelle", 4.6, 2187,
             "The 1966 original. Premium suede upper with serrated three stripes and herringbone rubber outsole.",
             "Adidas", ("Collegiate Navy", "Core Black", "Scarlet", "Collegiate Green")),
    _trainer("tr-5", "New Balance 550", 110, "nb-550", 4.5, 1456,
             "Basketball-inspired low-top with leather upper and perforated toe box. Clean court-to-street look.",
             "New Balance", ("White/Green", "White/Burgundy", "White/Navy"), ("new",)),
    _trainer("tr-6", "New Balance 530", 110, "nb-530", 4.6, 1823,
             "Retro runner with ABZORB cushioning and metallic silver accents. The Y2K silhouette everyone wants.",
             "New Balance", ("White/Silver", "Silver/Blue", "Black/Grey")),
    _trainer("tr-7", "Nike Air Max 90", 130, "nike-am90", 4.7, 3912,
             "Visible Air unit in the heel, waffle outsole, and the unmistakable layered upper. A 1990 icon.",
             "Nike", ("White/Black/Grey", "Infrared", "Triple White")),
    _trainer("tr-8", "Adidas Spezial", 100, "adidas-spezial", 4.5, 1234,
             "Handball court heritage with a slim suede upper. The terrace favourite that crossed into mainstream.",
             "Adidas", ("Light Blue", "Navy", "Red"), ("new",)),
    _trainer("tr-9", "New Balance 9060", 160, "nb-9060", 4.8, 876,
             "Futuristic design with SBS cushioning and suede/mesh panels. The most premium silhouette in the lineup.",
             "New Balance", ("Sea Salt", "Dark Olivine", "Turtledove")),
    _trainer("tr-10", "Nike Cortez", 90, "nike-cortez", 4.4, 1567,
             "The original Nike running shoe. Leather upper, herringbone outsole, and the signature Swoosh. Timeless since 1972.",
             "Nike", ("White/Varsity Red", "Black/White", "Sail/Gorge Green")),
)

_LANDSCAPE: Tuple[Product, ...] = (
    _sofa("sofa-1", "Alba 3-Seater Sofa", 2199, "alba-3-seater", 4.8, 342,
          "Curved silhouette in bouclé fabric with solid oak legs. Deep feather-down cushions and wide arms.",
          ("Cream Bouclé", "Charcoal", "Olive"), ("bestseller",)),
    _sofa("sofa-2", "Harlow Modular Corner Sofa", 3499, "harlow-corner", 4.7, 189,
          "L-shaped modular design with soft chenille upholstery. Rearrange sections to fit your space.",
          ("Stone", "Forest Green", "Slate Blue"), ("new",)),
    _sofa("sofa-3", "Oslo 2-Seater Sofa", 1599, "oslo-2-seater", 4.6, 278,
          "Compact Scandi-inspired two-seater with tapered walnut legs. High-resilience foam for lasting comfort.",
          ("Oatmeal Linen", "Sage", "Charcoal")),
    _sofa("sofa-4", "Finley Chaise Sofa", 2799, "finley-chaise", 4.5, 156,
          "Generous chaise end for stretching out. Pocket-sprung seat cushions with a feather-wrap top layer.",
          ("Grey Velvet", "Navy", "Blush")),
    _sofa("sofa-5", "Mila Compact Sofa", 1299, "mila-compact", 4.4, 312,
          "Apartment-sized sofa that doesn't compromise on comfort. Removable covers for easy cleaning.",
          ("Cream", "Warm Grey", "Terracotta")),
    _sofa("sofa-6", "Neva Velvet 3-Seater", 2499, "neva-velvet", 4.9, 423,
          "Plush velvet upholstery with rolled arms and brass-capped legs. A statement centrepiece for the living room.",
          ("Emerald", "Midnight Blue", "Dusty Rose"), ("bestseller",)),
    _sofa("sofa-7", "Strand Leather Sofa", 3199, "strand-leather", 4.7, 198,
          "Full-grain Italian leather on a solid hardwood frame. Develops a rich patina with age.",
          ("Cognac", "Black", "Tan")),
    _sofa("sofa-8", "Camden Linen Sofa", 1899, "camden-linen", 4.6, 267,
          "Relaxed linen upholstery with a lived-in look from day one. Deep seats and plump back cushions.",
          ("Natural Linen", "Soft White", "Clay")),
    _sofa("sofa-9", "Kensington 4-Seater", 3899, "kensington-4-seater", 4.8, 134,
          "Grand four-seater with scroll arms and deep button tufting. Feather-filled seat and back cushions.",
          ("Steel Grey", "Ivory", "Olive"), ("new",)),
    _sofa("sofa-10", "Luna Bouclé Sofa", 2099, "luna-boucle", 4.5, 389,
          "Organic curved shape in textured bouclé fabric. Low profile with tubular metal legs.",
          ("Off White", "Camel", "Sand")),
)

_BY_RATIO: Dict[str, Tuple[Product, ...]] = {
    "portrait": _PORTRAIT,
    "square": _SQUARE,
    "landscape": _LANDSCAPE,
}

DEMO_CATALOG: Tuple[Product, ...] = _PORTRAIT + _SQUARE + _LANDSCAPE

_BY_ID: Dict[str, Product] = {p.id: p for p in DEMO_CATALOG}


def get_demo_catalog() -> List[Product]:
    return list(DEMO_CATALOG)


def get_products_by_ratio(ratio: str) -> Tuple[Product, ...]:
    """Return one partition of the demo catalog as authored."""
    try:
        return _BY_RATIO[ratio]
    except KeyError:
        raise ValueError(f"Unknown image ratio: {ratio!r} (expected one of {RATIOS})") from None


def get_demo_product(product_id: str) -> Optional[Product]:
    return _BY_ID.get(product_id)
