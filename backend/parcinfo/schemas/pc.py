from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import StringConstraints, model_validator

from parcinfo.models.pc import PcType
from parcinfo.schemas.common import CamelModel, reject_explicit_nulls

IpAddress = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=45)]
MacAddress = Annotated[str, StringConstraints(strip_whitespace=True, max_length=17)]

_FLAG_FIELDS = (
    "is_ip_filtered",
    "has_windows",
    "has_windows_license",
    "has_office",
    "has_office_license",
    "has_antivirus",
)


class PcCreate(CamelModel):
    # Required for super_admin callers; forced to the caller's own otherwise
    establishment_id: Optional[int] = None
    type: PcType
    ip_address: IpAddress
    mac_address: Optional[MacAddress] = None
    office_name: Optional[str] = None
    users_info: Optional[str] = None
    installed_apps: Optional[str] = None
    server_services: Optional[str] = None
    is_ip_filtered: bool = False
    has_windows: bool = False
    has_windows_license: bool = False
    has_office: bool = False
    has_office_license: bool = False
    has_antivirus: bool = False
    antivirus_name: Optional[str] = None


class PcUpdate(CamelModel):
    establishment_id: Optional[int] = None
    type: Optional[PcType] = None
    ip_address: Optional[IpAddress] = None
    mac_address: Optional[MacAddress] = None
    office_name: Optional[str] = None
    users_info: Optional[str] = None
    installed_apps: Optional[str] = None
    server_services: Optional[str] = None
    is_ip_filtered: Optional[bool] = None
    has_windows: Optional[bool] = None
    has_windows_license: Optional[bool] = None
    has_office: Optional[bool] = None
    has_office_license: Optional[bool] = None
    has_antivirus: Optional[bool] = None
    antivirus_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def check_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            reject_explicit_nulls(data, ("establishment_id", "type", "ip_address") + _FLAG_FIELDS)
        return data


class PcResponse(CamelModel):
    id: int
    establishment_id: int
    type: PcType
    ip_address: str
    mac_address: Optional[str] = None
    office_name: Optional[str] = None
    users_info: Optional[str] = None
    installed_apps: Optional[str] = None
    server_services: Optional[str] = None
    is_ip_filtered: bool
    has_windows: bool
    has_windows_license: bool
    has_office: bool
    has_office_license: bool
    has_antivirus: bool
    antivirus_name: Optional[str] = None
    created_at: datetime
