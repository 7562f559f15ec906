"""SQLAlchemy database models for the rent reminder service."""

from sqlalchemy import Column, Date, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Largest value an INTEGER column holds on PostgreSQL
MAX_ROOM_NUMBER = 2**31 - 1


class Tenant(Base):
    """Tenant occupying a numbered room."""
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    move_in_date = Column(Date, nullable=False)
    payment_day = Column(Integer, nullable=False)
    # One tenant per room; concurrent inserts are settled by this constraint
    room_number = Column(Integer, nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} room={self.room_number} name={self.name!r}>"
