"""
MasterConfig model.

A saved master list: the nine dataset versions it was assembled from.
The materialized rows live in cm_data.t_master_data.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


VERSION_FK = "cm_conf.t_data_imsi_donor_versions.id"


class MasterConfig(Base):
    """Saved combination of dataset versions."""

    __tablename__ = "t_master_config"
    __table_args__ = {"schema": "cm_conf"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tele2_coverage: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    tele2_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    tele2_voice_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    tim_sparkle_price_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    tim_sparkle_roaming_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    hot_mobile_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    bics_coverage_bands_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    bics_coverage_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)
    bics_price_updated: Mapped[int] = mapped_column(Integer, ForeignKey(VERSION_FK), nullable=False)

    version_name: Mapped[str] = mapped_column(String(200), nullable=False)
    version_date: Mapped[date] = mapped_column(
        Date,
        server_default=func.current_date(),
        nullable=False,
    )

    @property
    def display_name(self) -> str:
        return f"{self.version_name} ( {self.version_date} )"
