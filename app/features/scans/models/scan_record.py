import enum

from sqlalchemy import JSON, Column, Enum, Index, Integer, String

from app.platform.db.base import BaseModel


class ScanType(enum.Enum):
    single = "single"
    full = "full"


class ScanRecord(BaseModel):
    """
    Summary row for one finished compliance scan.
    The full report is kept as JSON in scan_data.
    """
    __tablename__ = "scans"

    url = Column(String(2048), nullable=False, index=True)
    scan_type = Column(Enum(ScanType), nullable=False)

    score = Column(Integer, nullable=False)  # 0-100
    status = Column(String(32), nullable=False)
    total_pages = Column(Integer, default=1, nullable=False)
    violations_count = Column(Integer, default=0, nullable=False)
    passed_count = Column(Integer, default=0, nullable=False)

    scan_data = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_scans_created_at", "created_at"),
    )
