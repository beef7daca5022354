"""
Per-dataset layouts for the transfer step.

Each layout names the transfer routine configured in
cm_conf.t_data_etl_conf.transfer_function_name, the permanent table the rows
are appended to, and the ordered column list shared by the staging and
permanent tables. Staging columns are all text; the SQL type is the cast
applied when rows are copied into the permanent table.

Column order is the positional contract for uploads: spreadsheet column N
lands in column N of the staging table.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class DatasetLayout:
    routine_name: str
    permanent_table: str
    columns: Tuple[Tuple[str, str], ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.columns)


TEXT = "text"
NUMERIC = "numeric"
DATE = "date"


DATASET_LAYOUTS: Tuple[DatasetLayout, ...] = (
    DatasetLayout(
        routine_name="transfer_tele2_coverage",
        permanent_table="cm_data.t_tele2_coverage",
        columns=(
            ("region", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("tadig_code", TEXT),
            ("mcc_mnc", TEXT),
            ("gsm_out", TEXT),
            ("gprs_out", TEXT),
            ("umts_out", TEXT),
            ("lte_out", TEXT),
            ("lte_m_out", TEXT),
            ("nbiot_out", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_tele2_updated",
        permanent_table="cm_data.t_tele2_updated",
        columns=(
            ("tadig", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("data_per_mb", NUMERIC),
            ("sms_mo", NUMERIC),
            ("access_fee_per_imsi_eur_month", NUMERIC),
            ("tele2_2g", TEXT),
            ("tele2_3g", TEXT),
            ("tele2_4g", TEXT),
            ("price_zone", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_tele2_voice_updated",
        permanent_table="cm_data.t_tele2_voice_updated",
        columns=(
            ("tadig", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("voice_mo", NUMERIC),
            ("voice_mt", NUMERIC),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_tim_sparkle_price_updated",
        permanent_table="cm_data.t_sparkle_price_updated",
        columns=(
            ("plmno_code", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("data_per_mb", NUMERIC),
            ("sms_mo", NUMERIC),
            ("voice_mo", NUMERIC),
            ("voice_mt", NUMERIC),
            ("price_zone", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_tim_sparkle_roaming_updated",
        permanent_table="cm_data.t_sparkle_roaming_updated",
        columns=(
            ("plmno_code", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("gsm_outbound", TEXT),
            ("gprs_outbound", TEXT),
            ("umts_outbound", TEXT),
            ("lte_outbound", TEXT),
            ("lte_m_outbound", TEXT),
            ("nbiot_outbound", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_hot_mobile_updated",
        permanent_table="cm_data.t_hot_mobile_updated",
        columns=(
            ("mccmnc", TEXT),
            ("plmn", TEXT),
            ("operator", TEXT),
            ("country", TEXT),
            ("data_rate_euro_mb", NUMERIC),
            ("moc_mtc_sms_euro_min", NUMERIC),
            ("camel", TEXT),
            ("technology_2g_3g", TEXT),
            ("lte", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_bics_coverage_bands_updated",
        permanent_table="cm_data.t_bics_coverage_bands_updated",
        columns=(
            ("barring_reference_bics", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("band", TEXT),
            ("fra09_lte_m_launch", DATE),
            ("fra09_nb_iot_launch", DATE),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_bics_coverage_updated",
        permanent_table="cm_data.t_bics_coverage_updated",
        columns=(
            ("barring_reference_bics", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("gsm", TEXT),
            ("gprs", TEXT),
            ("umts", TEXT),
            ("lte", TEXT),
        ),
    ),
    DatasetLayout(
        routine_name="transfer_bics_price_updated",
        permanent_table="cm_data.t_bics_price_updated",
        columns=(
            ("barring_reference_bics", TEXT),
            ("country", TEXT),
            ("operator", TEXT),
            ("data_per_mb", NUMERIC),
            ("sms_mo", NUMERIC),
            ("voice_mo", NUMERIC),
            ("voice_mt", NUMERIC),
            ("price_zone", TEXT),
        ),
    ),
)


# Closed registry: routine name -> layout
TRANSFER_ROUTINES: Dict[str, DatasetLayout] = {
    layout.routine_name: layout for layout in DATASET_LAYOUTS
}
