"""Read-only access to catalog data needed at checkout time."""

from typing import Dict, Iterable

from sqlalchemy.orm import Session

from models.color import Color
from models.product import Product
from models.quality import Quality


def get_product(db: Session, product_id: int) -> Product | None:
    return db.query(Product).filter(Product.id == product_id).one_or_none()


def get_colors_by_ids(db: Session, ids: Iterable[int]) -> Dict[int, Color]:
    ids = {i for i in ids if i is not None}
    if not ids:
        return {}
    return {c.id: c for c in db.query(Color).filter(Color.id.in_(ids)).all()}


def get_qualities_by_ids(db: Session, ids: Iterable[int]) -> Dict[int, Quality]:
    ids = {i for i in ids if i is not None}
    if not ids:
        return {}
    return {q.id: q for q in db.query(Quality).filter(Quality.id.in_(ids)).all()}
