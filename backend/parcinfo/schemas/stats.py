from parcinfo.schemas.common import CamelModel


class StatsResponse(CamelModel):
    """Per-establishment aggregate counts over its PCs"""
    establishment_id: int
    establishment_name: str
    total_pcs: int
    protected_pcs: int
    windows_licensed: int
    office_licensed: int
    server_count: int
    filtered_ip_count: int
