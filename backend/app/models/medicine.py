from sqlalchemy import Column, Integer, String, Text, DateTime
from app.database import Base
from app.models.user import utcnow, same_as_created


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    description = Column(Text)
    created_by = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=same_as_created, onupdate=utcnow)
