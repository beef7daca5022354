"""
Master list service.

The master list joins the per-dataset master-list functions maintained in the
database. Every function takes the version ids it needs in a fixed order, so
the argument lists below are part of the database contract.
"""

import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.query import Columns, Rows, fetch_rows
from app.errors import RefDataError, VersionNotFoundError
from app.repositories.master_config_repository import MasterConfigRepository

logger = logging.getLogger(__name__)

# Position n (1-based) is the dataset whose version id the UI sends under key "n"
MASTER_DATASETS = (
    "tele2_coverage",
    "tele2_updated",
    "tele2_voice_updated",
    "tim_sparkle_price_updated",
    "tim_sparkle_roaming_updated",
    "hot_mobile_updated",
    "bics_coverage_bands_updated",
    "bics_coverage_updated",
    "bics_price_updated",
)

_BASE_ARGS = (4, 6, 2, 1, 8)

# (cte alias, function suffix, version positions passed to it)
MASTER_FUNCTIONS: Tuple[Tuple[str, str, Tuple[int, ...]], ...] = (
    ("t1", "coverage", _BASE_ARGS),
    ("t2", "technologies", _BASE_ARGS + (5, 7)),
    ("t3", "price_zones", _BASE_ARGS + (3,)),
    ("t4", "prices", _BASE_ARGS + (3,)),
    ("t5", "profile_1", _BASE_ARGS + (3,)),
    ("t6", "profile_2", _BASE_ARGS + (3,)),
    ("t7", "profile_3", _BASE_ARGS + (3,)),
    ("t8", "profile_4", _BASE_ARGS + (3,)),
    ("t9", "profile_5", _BASE_ARGS + (3,)),
    ("t11", "comments", _BASE_ARGS + (3,)),
)


def _columns(alias: str, *names: str) -> List[Tuple[str, str]]:
    return [(f"{alias}.{name}", name) for name in names]


# (select expression, output column) in master list order
MASTER_COLUMNS: List[Tuple[str, str]] = [
    *_columns("t1", "plmno_code", "mcc_mnc", "region", "country", "operator_name", "country_code", "mgt"),
    *_columns("t1", "sparkle_coverage", "hot_coverage", "tele2_coverage", "bics_coverage"),
    *_columns("t2", "sparkle_2g", "sparkle_3g", "sparkle_4g"),
    ("t2.hot_2g_3g", "hot_2g"),
    ("t2.hot_2g_3g", "hot_3g"),
    *_columns("t2", "hot_4g", "tele2_2g", "tele2_3g", "tele2_4g", "bics_2g", "bics_3g", "bics_4g"),
    *_columns("t3", "eprofile_3_tim", "hot_zone", "eprofile_2_tele2", "eprofile_1_bics"),
    *_columns("t4", "tim_data_per_mb", "tim_sms_mo", "tim_voice_mo", "tim_voice_mt"),
    *_columns("t4", "hot_data", "hot_sms", "hot_moc", "hot_mtc"),
    *_columns("t4", "tele2_data", "tele2_sms_mo", "tele2_voice_mo", "tele2_voice_mt"),
    *_columns("t4", "bics_data", "bics_sms", "bics_voice_mo", "bics_voice_mt"),
]
for _profile in range(1, 6):
    MASTER_COLUMNS += _columns(
        f"t{_profile + 4}",
        f"imsi_donor_tcp{_profile}",
        f"profile{_profile}_pz",
        f"profile{_profile}_price",
        f"profile{_profile}_broadband",
    )
MASTER_COLUMNS += _columns("t10", "prr", "blocked_countries")
MASTER_COLUMNS += _columns("t11", *(f"comments_profile_{n}" for n in range(1, 6)))

MASTER_COLUMN_NAMES = [name for _, name in MASTER_COLUMNS]


def version_params(version_ids: Dict[str, int]) -> Dict[str, int]:
    """Bind parameters v1..v9 from dataset-keyed version ids."""
    return {f"v{position}": version_ids[name] for position, name in enumerate(MASTER_DATASETS, start=1)}


def master_list_sql(select_prefix: str = "SELECT DISTINCT") -> str:
    """The master list query; select_prefix lets callers prepend an INSERT."""
    ctes = []
    for alias, suffix, positions in MASTER_FUNCTIONS:
        args = ", ".join(f":v{position}" for position in positions)
        ctes.append(f"master_list_{suffix} AS (SELECT * FROM cm_data.f_master_list_{suffix}({args}))")

    select_list = ", ".join(
        expr if expr.endswith(f".{name}") else f"{expr} AS {name}" for expr, name in MASTER_COLUMNS
    )
    joins = [
        f"JOIN master_list_{suffix} {alias} ON t1.id = {alias}.id"
        for alias, suffix, _ in MASTER_FUNCTIONS
        if alias != "t1"
    ]
    joins.append("JOIN cm_data.v_master_list_prr_and_blocked_countries t10 ON t1.id = t10.id")
    return (
        "WITH " + ",\n".join(ctes) + "\n"
        f"{select_prefix} {select_list}\n"
        "FROM master_list_coverage t1\n" + "\n".join(joins)
    )


NB_IOT_SQL = """
WITH operator_info AS (
    SELECT DISTINCT plmno_code, operator_name
    FROM cm_data.t_operator_info
    WHERE coalesce(plmno_code, '') != ''
),
sparkle AS (
    SELECT DISTINCT plmno_code, lower(nbiot_outbound) AS nbiot_outbound
    FROM cm_data.t_sparkle_roaming_updated WHERE version_id = :sparkle_version
),
tele2 AS (
    SELECT DISTINCT tadig_code, nbiot_out
    FROM cm_data.t_tele2_coverage WHERE version_id = :tele2_version
),
bics AS (
    SELECT barring_reference_bics, max(fra09_nb_iot_launch) AS fra09_nb_iot_launch
    FROM cm_data.t_bics_coverage_bands_updated
    WHERE version_id = :bics_version
    GROUP BY barring_reference_bics
)
SELECT t1.plmno_code,
       CASE WHEN t2.nbiot_outbound ~* 'x' THEN 'TRUE' ELSE 'FALSE' END AS tim,
       CASE WHEN t3.nbiot_out IS NULL THEN 'FALSE' ELSE 'TRUE' END AS "TELE2",
       CASE WHEN t4.fra09_nb_iot_launch IS NULL THEN 'FALSE' ELSE 'TRUE' END AS "BICS",
       t1.operator_name
FROM operator_info t1
LEFT JOIN sparkle t2 ON t1.plmno_code = t2.plmno_code
LEFT JOIN tele2 t3 ON t1.plmno_code = t3.tadig_code
LEFT JOIN bics t4 ON t1.plmno_code = t4.barring_reference_bics
ORDER BY t1.plmno_code
"""

CAT_M_SQL = """
WITH operator_info AS (
    SELECT DISTINCT plmno_code, operator_name, country
    FROM cm_data.t_operator_info
    WHERE coalesce(plmno_code, '') != ''
),
sparkle AS (
    SELECT DISTINCT plmno_code, lower(lte_m_outbound) AS lte_m_outbound
    FROM cm_data.t_sparkle_roaming_updated WHERE version_id = :sparkle_version
),
tele2 AS (
    SELECT DISTINCT tadig_code, lte_m_out
    FROM cm_data.t_tele2_coverage WHERE version_id = :tele2_version
),
bics AS (
    SELECT barring_reference_bics, max(fra09_lte_m_launch) AS fra09_lte_m_launch
    FROM cm_data.t_bics_coverage_bands_updated
    WHERE version_id = :bics_version
    GROUP BY barring_reference_bics
),
donors AS (
    SELECT t1.plmno_code,
           t5."general",
           CASE WHEN t2.lte_m_outbound ~* 'x' THEN 'TRUE' ELSE 'FALSE' END AS "TIM",
           CASE WHEN t3.lte_m_out IS NULL THEN 'FALSE' ELSE 'TRUE' END AS "TELE2",
           CASE WHEN t4.fra09_lte_m_launch IS NULL THEN 'FALSE' ELSE 'TRUE' END AS "BICS",
           t1.country,
           t1.operator_name
    FROM operator_info t1
    LEFT JOIN sparkle t2 ON t1.plmno_code = t2.plmno_code
    LEFT JOIN tele2 t3 ON t1.plmno_code = t3.tadig_code
    LEFT JOIN bics t4 ON t1.plmno_code = t4.barring_reference_bics
    LEFT JOIN cm_temp.t_cat_m_general t5 ON t1.plmno_code = t5.plmno
)
SELECT plmno_code, "general", "TIM", "TELE2", "BICS", country, operator_name,
       CASE WHEN "general" ~* 'true' AND "TIM" ~* 'false' THEN 'TRUE*' ELSE "TIM" END AS "TIM_general",
       CASE WHEN "general" ~* 'true' AND "TELE2" ~* 'false' THEN 'TRUE*' ELSE "TELE2" END AS "TELE2_general",
       CASE WHEN "general" ~* 'true' AND "BICS" ~* 'false' THEN 'TRUE*' ELSE "BICS" END AS "BICS_general"
FROM donors
"""


class DuplicateMasterVersionError(RefDataError):
    """A saved master list already uses exactly these versions."""

    kind = "duplicate"

    def __init__(self, master_config_id: int):
        super().__init__(f"Master configuration {master_config_id} already uses these versions")
        self.master_config_id = master_config_id


class MasterService:
    """Builds, saves and reloads master lists."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.configs = MasterConfigRepository(db)

    async def master_list(self, version_ids: Dict[str, int]) -> tuple[Rows, Columns]:
        return await fetch_rows(self.db, master_list_sql(), version_params(version_ids))

    async def nb_iot(self, version_ids: Dict[str, int]) -> tuple[Rows, Columns]:
        return await fetch_rows(self.db, NB_IOT_SQL, self._technology_params(version_ids))

    async def cat_m(self, version_ids: Dict[str, int]) -> tuple[Rows, Columns]:
        return await fetch_rows(self.db, CAT_M_SQL, self._technology_params(version_ids))

    async def saved_versions(self) -> List[Dict[str, Any]]:
        return [
            {"id": config.id, "version_name": config.display_name}
            for config in await self.configs.list_all()
        ]

    async def saved_version(self, config_id: int) -> Tuple[Rows, Columns, Dict[str, int]]:
        """
        Rows materialized for a saved configuration and its version ids keyed 1..9.

        Raises:
            VersionNotFoundError: no saved configuration with this id
        """
        config = await self.configs.get(config_id)
        if config is None:
            raise VersionNotFoundError(f"No master configuration {config_id}")

        version_ids = {
            str(position): getattr(config, name)
            for position, name in enumerate(MASTER_DATASETS, start=1)
        }
        sql = (
            f"SELECT {', '.join(MASTER_COLUMN_NAMES)} FROM cm_data.t_master_data "
            "WHERE master_config_id = :config_id"
        )
        rows, columns = await fetch_rows(self.db, sql, {"config_id": config_id})
        if not rows:
            logger.warning("No data found for master_config_id %s", config_id)
        return rows, columns, version_ids

    async def save_version(self, version_name: str, version_ids: Dict[str, int]) -> Dict[str, Any]:
        """
        Save a configuration and materialize its master list.

        Runs inside the caller's transaction; a failed materialization
        leaves no configuration behind.

        Raises:
            DuplicateMasterVersionError: the combination is already saved
        """
        existing = await self.configs.find_by_versions(version_ids)
        if existing is not None:
            logger.warning(
                "Version combination already saved as master_config_id %s", existing.id
            )
            raise DuplicateMasterVersionError(existing.id)

        config = await self.configs.create(version_name, version_ids)
        logger.debug("Inserted master_config %s (%s)", config.id, config.display_name)

        prefix = (
            f"INSERT INTO cm_data.t_master_data (master_config_id, {', '.join(MASTER_COLUMN_NAMES)})\n"
            "SELECT DISTINCT CAST(:master_config_id AS INTEGER),"
        )
        params = {"master_config_id": config.id, **version_params(version_ids)}
        rows, _ = await fetch_rows(self.db, master_list_sql(prefix) + "\nRETURNING id", params)
        if not rows:
            logger.warning("Master configuration %s materialized no rows", config.id)

        logger.info("Saved master version %s with %d rows", config.display_name, len(rows))
        return {"master_config_id": config.id, "version_name": config.display_name, "row_count": len(rows)}

    @staticmethod
    def _technology_params(version_ids: Dict[str, int]) -> Dict[str, int]:
        return {
            "sparkle_version": version_ids["tim_sparkle_roaming_updated"],
            "tele2_version": version_ids["tele2_coverage"],
            "bics_version": version_ids["bics_coverage_bands_updated"],
        }
