"""
Product submission model for SQLite
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from core.database import Base


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    contact = Column(Text, nullable=False)
    email = Column(Text, nullable=True, default="")

    # JSON-encoded arrays of strings
    product_links = Column(Text, nullable=True)
    image_urls = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="pending", server_default="pending")
