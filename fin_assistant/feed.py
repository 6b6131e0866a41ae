"""Parser for the delimited-text product feed (ASOS export).

parse_feed() turns the raw CSV text into Product records:
- dedupes by lower-cased name and by image URL with the query string stripped
- drops rows matching the content-safety exclusion list
- detects subcategory (first keyword hit) and brand (first substring hit)
- cleans up the scraped "Product Details" blurb into a short description
Rows that fail any check are skipped without raising.
"""

import ast
import csv
import hashlib
import io
import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from .config import FEED_MAX_PRICE, MIN_NAME_LENGTH
from .models import Product, ProductVariant

logger = logging.getLogger("fin.feed")

FEED_FIELDS = ("url", "name", "sizes", "category", "price", "color", "sku", "description", "images")

IMAGE_URL_RE = re.compile(r"https://images\.asos-media\.com/products/[^'\"\s,\]]+")

# Substrings that make an item unsuitable for a work demo.
EXCLUDED_KEYWORDS = (
    "mini skirt", "miniskirt", "mini dress", "minidress",
    "bikini", "swimsuit", "swim short", "swimwear",
    "bra ", "bralette", "brief", "thong", "knicker", "underwear", "lingerie",
    "bodycon", "cut-out", "cutout", "plunge", "low cut",
)

# Checked in order; the first keyword found in the name decides the subcategory.
# "t-shirt" contains "shirt", so t-shirts come first.
SUBCATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("t-shirts", ("t-shirt", "tee ", "tshirt")),
    ("jackets", ("jacket", "bomber", "biker", "puffer")),
    ("coats", ("coat", "trench", "parka", "overcoat")),
    ("blazers", ("blazer", "suit jacket")),
    ("tops", ("top", "cami", "bodysuit", "crop top", "tank")),
    ("shirts", ("shirt", "oxford", "flannel")),
    ("blouses", ("blouse",)),
    ("jumpers", ("jumper", "sweater", "pullover")),
    ("cardigans", ("cardigan",)),
    ("hoodies", ("hoodie", "hoody")),
    ("sweatshirts", ("sweatshirt", "fleece")),
    ("dresses", ("dress",)),
    ("skirts", ("skirt",)),
    ("jeans", ("jeans", "jean ")),
    ("trousers", ("trouser", "chino", "pant", "cargo", "jogger")),
    ("shorts", ("shorts",)),
    ("trainers", ("trainer", "sneaker", "running shoe")),
    ("boots", ("boot", "chelsea")),
    ("heels", ("heel", "stiletto", "court shoe", "pump")),
    ("sandals", ("sandal", "slider")),
    ("loafers", ("loafer", "moccasin")),
    ("flats", ("flat", "ballet", "ballerina")),
    ("bags", ("bag", "tote", "clutch", "purse", "handbag", "satchel")),
    ("backpacks", ("backpack", "rucksack")),
    ("scarves", ("scarf", "snood")),
    ("hats", ("hat", "cap", "beanie", "beret")),
    ("belts", ("belt",)),
    ("sunglasses", ("sunglasses", "sunnies")),
    ("jewellery", ("necklace", "bracelet", "earring", "ring ", "chain", "pendant")),
)

DEFAULT_BRAND = "ASOS"

# Longer names come before their prefixes ("ASOS DESIGN" before "ASOS").
BRANDS = (
    "ASOS DESIGN", "ASOS", "Nike", "Adidas", "Puma", "New Balance", "Reebok",
    "Tommy Hilfiger", "Tommy Jeans", "Levi's", "Calvin Klein", "Guess",
    "Dr Martens", "Converse", "Vans", "New Look", "River Island",
    "Topshop", "Topman", "Miss Selfridge", "Monki", "Weekday", "Bershka",
    "Stradivarius", "Mango", "Carhartt", "The North Face", "Columbia",
    "Timberland", "Ted Baker", "French Connection", "AllSaints", "Whistles",
    "Reiss", "Karen Millen", "Barbour", "Superdry", "Jack & Jones",
    "Only & Sons", "Vero Moda", "Selected", "Noisy May", "Pieces",
    "VAI21", "COLLUSION", "Reclaimed Vintage", "4th & Reckless",
)

# Phrases that mark where the real feature list starts after "<type> by <Brand>".
_FEATURE_START_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"Toggle\s", r"Zip\s", r"Button\s", r"High\s", r"Low\s", r"Spread\s", r"Notch\s",
        r"Regular\sfit", r"Relaxed\sfit", r"Oversized\sfit", r"Slim\sfit",
        r"Side\s", r"Front\s", r"Functional\s", r"Logo\s",
        r"Hit\sthat", r"Love\sat", r"Throw\son", r"Jacket\supgrade", r"That\snew",
        r"The\sdenim", r"Welcome\sto", r"Mid-season", r"V-neck", r"Crew\sneck",
    )
]
_PRODUCT_DETAILS_RE = re.compile(r"Product Details['\"]: ['\"]([^}]+)")


def is_inappropriate(name: str, description: str = "") -> bool:
    text = f"{name} {description}".lower()
    return any(kw in text for kw in EXCLUDED_KEYWORDS)


def detect_subcategory(name: str) -> Optional[str]:
    lower = name.lower()
    for subcategory, keywords in SUBCATEGORY_KEYWORDS:
        for kw in keywords:
            if kw in lower:
                return subcategory
    return None


def extract_brand(name: str) -> str:
    lower = name.lower()
    for brand in BRANDS:
        if brand.lower() in lower:
            return brand
    return DEFAULT_BRAND


def canonical_image_url(url: str) -> str:
    return url.split("?", 1)[0]


def _product_details(raw: str) -> Optional[str]:
    """Pull the "Product Details" text out of the scraped description column."""
    try:
        entries = ast.literal_eval(raw)
    except (ValueError, SyntaxError, MemoryError, RecursionError):
        entries = None
    if isinstance(entries, (list, tuple)):
        for entry in entries:
            if isinstance(entry, dict) and entry.get("Product Details"):
                return str(entry["Product Details"])
        return None

    match = _PRODUCT_DETAILS_RE.search(raw)
    if match:
        return match.group(1).strip().rstrip("'\"").strip()
    return None


def clean_description(raw: str) -> Optional[str]:
    """Best-effort cleanup of the scraped description; None when nothing usable remains."""
    if not raw:
        return None
    details = _product_details(raw)
    if not details:
        return None

    cleaned = re.sub(r"Product Code:\s*\d+['\"]?$", "", details).strip()
    cleaned = re.sub(r"Exclusive to ASOS", " ", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"Part of a co-ord", " ", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"Sold separately", "", cleaned, flags=re.IGNORECASE)

    # Drop the "<Type> by <Brand>" lead-in up to the first feature phrase.
    by_match = re.search(r"\sby\s", cleaned, re.IGNORECASE)
    if by_match:
        after_by = cleaned[by_match.end():]
        earliest = len(after_by)
        for pattern in _FEATURE_START_PATTERNS:
            m = pattern.search(after_by)
            if m and m.start() < earliest:
                earliest = m.start()
        if earliest < len(after_by):
            cleaned = after_by[earliest:]

    # Scraped bullet lists arrive joined without separators ("Zip fasteningRegular fit").
    cleaned = re.sub(r"([a-z])([A-Z])", r"\1. \2", cleaned)
    cleaned = re.sub(r"([A-Z]{2,})([A-Z][a-z])", r"\1. \2", cleaned)

    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    cleaned = re.sub(r"\.\s*\.", ".", cleaned)
    cleaned = re.sub(r"^[,.\s]+", "", cleaned)

    if not cleaned:
        return None
    if cleaned[-1] not in ".!?":
        cleaned += "."
    return cleaned[0].upper() + cleaned[1:]


def _stable_hash(text: str) -> int:
    return int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16)


def _parse_sizes(raw: str) -> Tuple[str, ...]:
    if not raw:
        return ()
    sizes = (s.strip() for s in raw.split(","))
    return tuple(s for s in sizes if s and "Out of stock" not in s)


def _parse_color(raw: str) -> str:
    color = (raw or "").strip() or "Multi"
    return "Multi" if len(color) > 30 else color


def _rows(text: str) -> Iterable[Dict[str, str]]:
    """Yield rows keyed by FEED_FIELDS; the header row is skipped."""
    reader = csv.reader(io.StringIO(text))
    try:
        next(reader)
    except StopIteration:
        return
    except csv.Error as e:
        logger.warning("Unreadable feed header: %s", e)
    while True:
        try:
            values = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            logger.debug("Skipping malformed feed row: %s", e)
            continue
        if not values or not any(v.strip() for v in values):
            continue
        yield dict(zip(FEED_FIELDS, values))


def parse_feed(text: str, max_price: float = FEED_MAX_PRICE) -> List[Product]:
    """Parse the feed CSV into deduplicated, work-safe products."""
    products: List[Product] = []
    seen_names: set[str] = set()
    seen_images: set[str] = set()
    skipped = 0

    for row in _rows(text):
        name = (row.get("name") or "").strip()
        raw_price = (row.get("price") or "").strip()
        if not name or not raw_price:
            skipped += 1
            continue

        try:
            price = float(raw_price)
        except ValueError:
            skipped += 1
            continue
        if not 0 < price < max_price:
            skipped += 1
            continue

        image_match = IMAGE_URL_RE.search(" ".join(row.values()))
        if not image_match:
            skipped += 1
            continue
        image_url = canonical_image_url(image_match.group(0))
        if image_url in seen_images:
            skipped += 1
            continue

        if len(name) < MIN_NAME_LENGTH or name.lower() in seen_names:
            skipped += 1
            continue

        subcategory = detect_subcategory(name)
        if not subcategory:
            skipped += 1
            continue

        raw_description = row.get("description") or ""
        if is_inappropriate(name, raw_description):
            skipped += 1
            continue

        sizes = _parse_sizes(row.get("sizes") or "")
        color = _parse_color(row.get("color") or "")
        variants: Tuple[ProductVariant, ...] = (ProductVariant(type="color", options=(color,)),)
        if sizes:
            variants += (ProductVariant(type="size", options=sizes),)

        # Feed rows carry no ratings; derive stable demo values from the name.
        h = _stable_hash(name.lower())

        seen_names.add(name.lower())
        seen_images.add(image_url)
        products.append(
            Product(
                id=f"asos-{len(products) + 1}",
                name=name,
                price=price,
                currency="GBP",
                image=image_url,
                rating=round(3.5 + (h % 16) / 10, 1),
                review_count=50 + (h >> 4) % 500,
                description=clean_description(raw_description) or "",
                category="clothing",
                subcategory=subcategory,
                brand=extract_brand(name),
                in_stock=True,
                variants=variants,
                tags=("new",) if (h >> 12) % 5 == 0 else (),
                attributes={"gender": "unisex", "sizes": sizes},
            )
        )

    logger.debug("Feed parse kept %d rows, skipped %d", len(products), skipped)
    return products
