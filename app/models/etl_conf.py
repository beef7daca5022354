"""
ETL configuration models.

ImsiDonor and DataEtlConf are reference data maintained by configuration.
DatasetVersion is the version registry: one row per ingested snapshot.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ImsiDonor(Base):
    """An IMSI donor (roaming partner) supplying one or more datasets."""

    __tablename__ = "t_imsi_donors"
    __table_args__ = {"schema": "cm_conf"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    imsi_donor_name: Mapped[str] = mapped_column(String(100), nullable=False)

    datasets: Mapped[List["DataEtlConf"]] = relationship(back_populates="imsi_donor")


class DataEtlConf(Base):
    """
    Dataset descriptor.

    Connects a staging table to its permanent, versioned table through the
    name of the transfer routine that copies rows between them.
    """

    __tablename__ = "t_data_etl_conf"
    __table_args__ = {"schema": "cm_conf"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    imsi_donor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cm_conf.t_imsi_donors.id"),
        nullable=False,
    )

    data_set_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Qualified names, e.g. cm_temp.t_tele2_coverage_temp
    temp_table_name: Mapped[str] = mapped_column(String(200), nullable=False)
    permanent_table_name: Mapped[str] = mapped_column(String(200), nullable=False)

    transfer_function_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    imsi_donor: Mapped["ImsiDonor"] = relationship(back_populates="datasets", lazy="selectin")


class DatasetVersion(Base):
    """
    One ingested snapshot of a dataset.

    Rows are never updated or deleted by the application.
    """

    __tablename__ = "t_data_imsi_donor_versions"
    __table_args__ = {"schema": "cm_conf"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    etl_conf_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cm_conf.t_data_etl_conf.id"),
        nullable=False,
        index=True,
    )

    version_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Server-assigned, never taken from the client
    version_date: Mapped[date] = mapped_column(
        Date,
        server_default=func.current_date(),
        nullable=False,
    )

    @property
    def display_name(self) -> str:
        return f"{self.version_name} ( {self.version_date} )"
