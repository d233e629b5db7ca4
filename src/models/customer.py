import uuid
from sqlalchemy import Column, Text, Uuid
from src.db.session import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=True)
    first_name = Column(Text, nullable=True)
