import uuid
from sqlalchemy import Boolean, Column, Integer, Text, Uuid
from src.db.session import Base


class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text, nullable=True)
    # Untracked variants are always considered available
    tracked = Column(Boolean, nullable=False, default=True)
    on_hand = Column(Integer, nullable=False, default=0)
    on_hold = Column(Integer, nullable=False, default=0)
