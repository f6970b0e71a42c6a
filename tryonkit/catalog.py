"""
Product catalog.

Each product carries tuning constants for its overlay: `base_scale`
multiplies the geometric scale, `offset_x`/`offset_y` are pixel offsets
added after the landmark position is converted to pixels.
"""
from __future__ import annotations
import yaml
from pathlib import Path
from typing import Literal, Optional, Sequence
from pydantic import BaseModel, TypeAdapter

JewelryType = Literal["ring", "necklace", "earring"]

class Product(BaseModel):
    id: str
    name: str
    type: JewelryType
    image: str
    base_scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    price: Optional[str] = None
    description: Optional[str] = None

PRODUCTS: list[Product] = [
    Product(id="ring-1", name="Classic Gold Band", type="ring", image="assets/ring1.png",
            base_scale=2.5, price="₺4,500", description="Elegant 14K gold band with polished finish"),
    Product(id="ring-2", name="Diamond Solitaire", type="ring", image="assets/ring2.png",
            base_scale=3.0, offset_y=-5, price="₺12,000", description="Stunning solitaire with brilliant cut diamond"),
    Product(id="ring-3", name="Twisted Gold Ring", type="ring", image="assets/ring3.png",
            base_scale=2.8, price="₺5,200", description="Modern twisted design in 18K gold"),
    Product(id="necklace-1", name="Minimal Gold Chain", type="necklace", image="assets/necklace1.png",
            base_scale=1.2, offset_y=30, price="₺8,500", description="Delicate chain perfect for everyday wear"),
    Product(id="necklace-2", name="Pearl Pendant", type="necklace", image="assets/necklace2.png",
            base_scale=1.4, offset_y=40, price="₺15,000", description="Freshwater pearl on gold chain"),
    Product(id="necklace-3", name="Layered Gold Necklace", type="necklace", image="assets/necklace3.png",
            base_scale=1.5, offset_y=35, price="₺11,000", description="Trendy layered design"),
    Product(id="earring-1", name="Gold Studs", type="earring", image="assets/earring1.png",
            base_scale=0.8, offset_y=10, price="₺2,800", description="Classic gold stud earrings"),
    Product(id="earring-2", name="Drop Earrings", type="earring", image="assets/earring2.png",
            base_scale=1.2, offset_y=15, price="₺6,500", description="Elegant drop design with crystals"),
    Product(id="earring-3", name="Hoop Earrings", type="earring", image="assets/earring3.png",
            base_scale=1.0, offset_x=5, offset_y=5, price="₺4,200", description="Modern gold hoops"),
]

def lookup(product_id: str, catalog: Sequence[Product] = PRODUCTS) -> Optional[Product]:
    return next((p for p in catalog if p.id == product_id), None)

def products_by_type(typ: JewelryType, catalog: Sequence[Product] = PRODUCTS) -> list[Product]:
    return [p for p in catalog if p.type == typ]

def load_catalog(path: str|Path|None) -> list[Product]:
    """YAML list of products; falls back to the built-in catalog when no file is given."""
    if not path or not Path(path).exists():
        return list(PRODUCTS)
    with open(path, "r") as f: data = yaml.safe_load(f) or []
    return TypeAdapter(list[Product]).validate_python(data)
