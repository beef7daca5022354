"""
Screens service - the UI navigation tree, assembled by the database.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.query import Columns, Rows, fetch_rows

SCREENS_CONFIG_SQL = """
WITH level_2 AS (
    SELECT sub_screen_id,
           json_agg(json_build_object(
               'subScreenId', id,
               'subScreenName', sub_screen_levle_2_name,
               'subScreenConf', jsonb_strip_nulls(jsonb_build_object(
                   'allowAdd', add_data,
                   'allowEdit', edit_data,
                   'allowDelete', delete_data,
                   'allowUpload', upload_data,
                   'skipRows', skip_rows))
           )) AS sub_screens_level_2
    FROM cm_conf.t_cm_system_sub_screens_level_2
    GROUP BY sub_screen_id
),
sub_screens AS (
    SELECT screen_id,
           jsonb_strip_nulls(jsonb_build_object(
               'subScreenId', t1.id,
               'subScreenName', sub_screen_name,
               'subScreenstitle', sub_screen_name,
               'subScreenConf', json_build_object(
                   'allowAdd', add_data,
                   'allowEdit', edit_data,
                   'allowDelete', delete_data,
                   'allowUpload', upload_data),
               'subScreensLevel2', sub_screens_level_2)) AS sub_screen
    FROM cm_conf.t_cm_system_sub_screens t1
    LEFT JOIN level_2 t2 ON t1.id = t2.sub_screen_id
),
grouped AS (
    SELECT screen_id, json_agg(sub_screen) AS sub_screens
    FROM sub_screens
    GROUP BY screen_id
)
SELECT json_agg(json_build_object(
           'screenId', t1.id,
           'screenName', t1.screen_name,
           'screenTitle', t1.title,
           'subScreens', t2.sub_screens)) AS all_screens_config
FROM cm_conf.t_cm_system_screens t1
JOIN grouped t2 ON t1.id = t2.screen_id
"""


async def get_screens_config(db: AsyncSession) -> tuple[Rows, Columns]:
    return await fetch_rows(db, SCREENS_CONFIG_SQL)
