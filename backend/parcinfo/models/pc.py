from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from parcinfo.core.database import Base


class PcType(str, enum.Enum):
    """Kinds of tracked machines"""
    SERVER = "Server"
    MINI_SERVER = "Mini Server"
    TERMINAL = "Terminal"


SERVER_TYPES = (PcType.SERVER, PcType.MINI_SERVER)


class PC(Base):
    """Computer, server or terminal owned by one establishment"""
    __tablename__ = "pcs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    establishment_id = Column(
        Integer,
        ForeignKey("establishments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    type = Column(SQLEnum(PcType), nullable=False)

    # Network
    ip_address = Column(String(45), nullable=False)
    is_ip_filtered = Column(Boolean, default=False, nullable=False)
    mac_address = Column(String(17), nullable=True)

    # Location / usage (free text)
    office_name = Column(Text, nullable=True)
    users_info = Column(Text, nullable=True)
    installed_apps = Column(Text, nullable=True)
    server_services = Column(Text, nullable=True)  # meaningful for server types

    # Licensing / protection
    has_windows = Column(Boolean, default=False, nullable=False)
    has_windows_license = Column(Boolean, default=False, nullable=False)
    has_office = Column(Boolean, default=False, nullable=False)
    has_office_license = Column(Boolean, default=False, nullable=False)
    has_antivirus = Column(Boolean, default=False, nullable=False)
    antivirus_name = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    establishment = relationship("Establishment", back_populates="pcs")

    def __repr__(self):
        return f"<PC {self.id} {self.type} {self.ip_address}>"
