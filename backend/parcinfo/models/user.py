from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from parcinfo.core.database import Base


class UserRole(str, enum.Enum):
    """User roles, from least to most privileged"""
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(512), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)

    # NULL only for super_admin ("all access")
    establishment_id = Column(
        Integer,
        ForeignKey("establishments.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    establishment = relationship("Establishment", back_populates="users")

    def __repr__(self):
        return f"<User {self.username}>"
