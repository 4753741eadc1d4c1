from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class SpecificationRecord(Base):
    __tablename__ = "specifications"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, default="")
    description = Column(Text)
    document = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
