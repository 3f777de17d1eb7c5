from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from parcinfo.core.database import Base


class Establishment(Base):
    """Organizational site; the tenancy boundary for scoped access"""
    __tablename__ = "establishments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships (no cascade: deletion is refused while rows reference it)
    users = relationship("User", back_populates="establishment", passive_deletes="all")
    pcs = relationship("PC", back_populates="establishment", passive_deletes="all")

    def __repr__(self):
        return f"<Establishment {self.id} {self.name!r}>"
