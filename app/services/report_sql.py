"""
Read-only report statements over the reference views.

The views and tables named here are maintained in the database; the API
only selects from them.
"""

PRICE_ZONE_TCP_SQL = """
SELECT plmno_code, mcc_mnc, region, country, operator_name, price_zone,
       "2g", "3g", "4g", cat_m, nb_iot, "comments", imsi_donor
FROM cm_data.v_price_zone_list_tcp{tcp}_global
ORDER BY plmno_code
"""

BAP_SQL = """
WITH all_baps AS (
    SELECT id, country AS country_name, mcc, active AS active_imsi_donor,
           imsi_donor AS imsi_donor_name, 1 AS tcp
    FROM cm_data.t_telit_next_carrier_list_bap_tcp1
    UNION
    SELECT id, country, mcc, active, imsi_donor, 2 FROM cm_data.t_telit_next_carrier_list_bap_tcp2
    UNION
    SELECT id, country, mcc, active, imsi_donor, 3 FROM cm_data.t_telit_next_carrier_list_bap_tcp3
    UNION
    SELECT id, country, mcc, active, imsi_donor, 4 FROM cm_data.t_telit_next_carrier_list_bap_tcp4
    UNION
    SELECT id, country, mcc, active, imsi_donor, 5 FROM cm_data.t_telit_next_carrier_list_bap_tcp5
)
SELECT id, country_name, mcc, active_imsi_donor, imsi_donor_name
FROM all_baps
WHERE tcp = :tcp
ORDER BY country_name
"""

PRR_COMMENT = (
    "CASE WHEN t10.prr = 'TRUE' AND (t10.country ~* 'china' OR t10.country ~* 'australia') "
    "THEN 'eUICC SIM is required for Permanent Roaming' ELSE '' END"
)

ACCESS_FEE_COMMENT = (
    "CASE WHEN t14.access_fee_per_imsi_eur_month::numeric < 0.2 THEN 'Access Fees Group A' "
    "WHEN t14.access_fee_per_imsi_eur_month::numeric >= 0.2 THEN 'Access Fees Group B' "
    "ELSE '' END"
)

_EPROFILE_JOINS = """
FROM cm_data.v_master_list_coverage t1
JOIN cm_data.v_master_list_technologies t2 ON t1.id = t2.id
JOIN cm_data.v_master_list_price_zones t3 ON t1.id = t3.id
JOIN cm_data.v_master_list_prr_and_blocked_countries t10 ON t1.id = t10.id
JOIN cm_data.v_master_list_comments t11 ON t1.id = t11.id
JOIN cm_data.v_cat_m t12 ON t1.id = t12.id
JOIN cm_data.v_nb_iot t13 ON t1.id = t13.id
"""


def _eprofile_sql(technologies: str, cat_m: str, nb_iot: str, comments: str, extra_join: str, profile_column: str) -> str:
    return (
        "SELECT DISTINCT t1.plmno_code, t1.mcc_mnc, t1.region, t1.country, t1.operator_name, "
        f"t3.eprofile_1_bics, {technologies}, {cat_m} AS cat_m, {nb_iot} AS nb_iot, "
        f"{comments} AS comments"
        f"{_EPROFILE_JOINS}{extra_join}"
        f"WHERE t3.{profile_column} < 8"
    )


EPROFILE_SQL = {
    1: _eprofile_sql(
        "t2.bics_2g, t2.bics_3g, t2.bics_4g",
        't12."BICS"',
        't13."BICS"',
        PRR_COMMENT,
        "",
        "eprofile_1_bics",
    ),
    2: _eprofile_sql(
        "t2.tele2_2g, t2.tele2_3g, t2.tele2_4g",
        't12."TELE2"',
        't13."TELE2"',
        f"{PRR_COMMENT} || ' ' || {ACCESS_FEE_COMMENT}",
        "LEFT JOIN cm_temp.t_tele2_updated_temp t14 ON t1.plmno_code = t14.tadig\n",
        "eprofile_2_tele2",
    ),
    3: _eprofile_sql(
        "t2.sparkle_2g, t2.sparkle_3g, t2.sparkle_4g",
        't12."TIM"',
        "t13.tim",
        PRR_COMMENT,
        "",
        "eprofile_3_tim",
    ),
    4: """
SELECT plmno, mcc_mnc, region, country, "operator", pz, "2g", "3g", "4g", cat_m, nb_iot, "comments"
FROM cm_data.t_eprofile_4
""",
    5: """
SELECT plmno, mcc_mnc, region, country, "operator", pz, "2g", "3g", "4g", cat_m, nb_iot, "comments"
FROM cm_data.t_eprofile_5
""",
}
