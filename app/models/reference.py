"""
Reference table models.

Small back-office lookup tables edited directly through the API.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class OperatorInfo(Base):
    """Operator list keyed by PLMN (TADIG) code."""

    __tablename__ = "t_operator_info"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plmno_code: Mapped[Optional[str]] = mapped_column(String(20))
    mcc_mnc: Mapped[Optional[str]] = mapped_column(String(20))
    region: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    operator_name: Mapped[Optional[str]] = mapped_column(String(200))
    country_code: Mapped[Optional[str]] = mapped_column(String(20))
    mgt: Mapped[Optional[str]] = mapped_column(String(50))


class Sunset2G3G(Base):
    """2G/3G network shutdown dates per operator."""

    __tablename__ = "t_2g_3g_sunset"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plmno_code: Mapped[Optional[str]] = mapped_column(String(20))
    country_name: Mapped[Optional[str]] = mapped_column(String(100))
    operator_name: Mapped[Optional[str]] = mapped_column(String(200))
    sunset_2g: Mapped[Optional[str]] = mapped_column(String(50))
    sunset_3g: Mapped[Optional[str]] = mapped_column(String(50))


class CountryRoamingProhibited(Base):
    """Countries where permanent roaming is prohibited, with their price zone."""

    __tablename__ = "t_countries_roaming_prohibited"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country_name: Mapped[Optional[str]] = mapped_column(String(100))
    price_zone: Mapped[Optional[str]] = mapped_column(String(20))


class IotLaunchesAndSteering(Base):
    """Technology launch dates and steering flags per operator (read-only)."""

    __tablename__ = "t_iot_launches_and_steering"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    region: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    operator: Mapped[Optional[str]] = mapped_column(String(200))
    mgt_cc_nc: Mapped[Optional[str]] = mapped_column(String(50))
    mcc_mnc: Mapped[Optional[str]] = mapped_column(String(20))
    tadig_code: Mapped[Optional[str]] = mapped_column(String(20))
    gsm_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    gprs_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    umts_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    camel_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    lte_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    nsa_5g_date_outbound: Mapped[Optional[str]] = mapped_column("5g_nsa_date_outbound", String(50))
    volte_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    lte_m_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    nb_iot_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    nrtrde_date_outbound: Mapped[Optional[str]] = mapped_column(String(50))
    steering: Mapped[Optional[str]] = mapped_column(String(50))
    comment: Mapped[Optional[str]] = mapped_column(Text)
    psm_sup_lte_m: Mapped[Optional[str]] = mapped_column(String(20))
    edrx_sup_lte_m: Mapped[Optional[str]] = mapped_column(String(20))
    psm_sup_nbiot: Mapped[Optional[str]] = mapped_column(String(20))
    edrx_sup_nbiot: Mapped[Optional[str]] = mapped_column(String(20))


class NextTcp(Base):
    """Commercial tariff profiles (TCP 1-5)."""

    __tablename__ = "t_next_tcps"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tcp_name: Mapped[str] = mapped_column(String(100), nullable=False)


class PzCutOffPoint(Base):
    """Price-zone cut-off points per TCP."""

    __tablename__ = "t_pz_cut_off_points"
    __table_args__ = {"schema": "cm_data"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tcp_id: Mapped[int] = mapped_column(Integer, ForeignKey("cm_data.t_next_tcps.id"), nullable=False)
    price_zone: Mapped[Optional[str]] = mapped_column(String(20))
    cut_off_point: Mapped[Optional[str]] = mapped_column(String(50))
