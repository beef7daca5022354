"""initial_refdata_schema

Revision ID: 7b3e1c0a9d42
Revises:
Create Date: 2026-10-19

Create the cm_conf / cm_data / cm_temp schemas, the ETL configuration
tables, one staging and one permanent table per dataset, the reference
tables and the saved master list tables. Seeds the IMSI donors and the
nine dataset descriptors.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from app.services.dataset_layouts import DATASET_LAYOUTS


# revision identifiers, used by Alembic.
revision: str = '7b3e1c0a9d42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SCHEMAS = ('cm_conf', 'cm_data', 'cm_temp')

IMSI_DONORS = [
    {'id': 1, 'imsi_donor_name': 'TIM Sparkle'},
    {'id': 2, 'imsi_donor_name': 'Tele2'},
    {'id': 3, 'imsi_donor_name': 'HOT Mobile'},
    {'id': 4, 'imsi_donor_name': 'BICS'},
]

# Dataset id -> (donor id, display name); ids follow DATASET_LAYOUTS order
DATASETS = [
    (2, 'Tele2 Coverage'),
    (2, 'Tele2 Updated'),
    (2, 'Tele2 Voice Updated'),
    (1, 'TIM Sparkle Price Updated'),
    (1, 'TIM Sparkle Roaming Updated'),
    (3, 'HOT Mobile Updated'),
    (4, 'BICS Coverage Bands Updated'),
    (4, 'BICS Coverage Updated'),
    (4, 'BICS Price Updated'),
]

MASTER_DATASETS = (
    'tele2_coverage',
    'tele2_updated',
    'tele2_voice_updated',
    'tim_sparkle_price_updated',
    'tim_sparkle_roaming_updated',
    'hot_mobile_updated',
    'bics_coverage_bands_updated',
    'bics_coverage_updated',
    'bics_price_updated',
)

MASTER_DATA_COLUMNS = (
    'plmno_code', 'mcc_mnc', 'region', 'country', 'operator_name', 'country_code', 'mgt',
    'sparkle_coverage', 'hot_coverage', 'tele2_coverage', 'bics_coverage',
    'sparkle_2g', 'sparkle_3g', 'sparkle_4g', 'hot_2g', 'hot_3g', 'hot_4g',
    'tele2_2g', 'tele2_3g', 'tele2_4g', 'bics_2g', 'bics_3g', 'bics_4g',
    'eprofile_3_tim', 'hot_zone', 'eprofile_2_tele2', 'eprofile_1_bics',
    'tim_data_per_mb', 'tim_sms_mo', 'tim_voice_mo', 'tim_voice_mt',
    'hot_data', 'hot_sms', 'hot_moc', 'hot_mtc',
    'tele2_data', 'tele2_sms_mo', 'tele2_voice_mo', 'tele2_voice_mt',
    'bics_data', 'bics_sms', 'bics_voice_mo', 'bics_voice_mt',
) + tuple(
    f'{prefix}{n}{suffix}'
    for n in range(1, 6)
    for prefix, suffix in (('imsi_donor_tcp', ''), ('profile', '_pz'), ('profile', '_price'), ('profile', '_broadband'))
) + ('prr', 'blocked_countries') + tuple(f'comments_profile_{n}' for n in range(1, 6))

SQL_TYPES = {
    'text': sa.Text,
    'numeric': sa.Numeric,
    'date': sa.Date,
}


def _identity_id() -> sa.Column:
    return sa.Column('id', sa.Integer(), sa.Identity(always=False), primary_key=True)


def _split(table_ref: str) -> tuple:
    schema, name = table_ref.split('.', 1)
    return schema, name


def _staging_name(permanent_table: str) -> str:
    return f"{_split(permanent_table)[1]}_temp"


def upgrade() -> None:
    """Create schemas, configuration, dataset and reference tables."""

    for schema in SCHEMAS:
        op.execute(f'CREATE SCHEMA IF NOT EXISTS {schema}')

    # 1. ETL configuration
    donors = op.create_table(
        't_imsi_donors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('imsi_donor_name', sa.String(length=100), nullable=False),
        schema='cm_conf',
    )
    etl_conf = op.create_table(
        't_data_etl_conf',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('imsi_donor_id', sa.Integer(), sa.ForeignKey('cm_conf.t_imsi_donors.id'), nullable=False),
        sa.Column('data_set_name', sa.String(length=100), nullable=False),
        sa.Column('temp_table_name', sa.String(length=200), nullable=False),
        sa.Column('permanent_table_name', sa.String(length=200), nullable=False),
        sa.Column('transfer_function_name', sa.String(length=100), nullable=True),
        schema='cm_conf',
    )
    op.create_table(
        't_data_imsi_donor_versions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('etl_conf_id', sa.Integer(), sa.ForeignKey('cm_conf.t_data_etl_conf.id'), nullable=False),
        sa.Column('version_name', sa.String(length=200), nullable=False),
        sa.Column('version_date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        schema='cm_conf',
    )
    op.create_index(
        'ix_t_data_imsi_donor_versions_etl_conf_id',
        't_data_imsi_donor_versions',
        ['etl_conf_id', 'version_name'],
        schema='cm_conf',
    )

    # 2. Staging (all text) and permanent (typed, versioned) tables per dataset
    for layout in DATASET_LAYOUTS:
        op.create_table(
            _staging_name(layout.permanent_table),
            _identity_id(),
            *[sa.Column(name, sa.Text(), nullable=True) for name in layout.column_names],
            schema='cm_temp',
        )
        schema, name = _split(layout.permanent_table)
        op.create_table(
            name,
            _identity_id(),
            *[sa.Column(col, SQL_TYPES[sql_type](), nullable=True) for col, sql_type in layout.columns],
            sa.Column(
                'version_id',
                sa.Integer(),
                sa.ForeignKey('cm_conf.t_data_imsi_donor_versions.id'),
                nullable=False,
            ),
            schema=schema,
        )
        op.create_index(f'ix_{name}_version_id', name, ['version_id'], schema=schema)

    # 3. Reference tables
    op.create_table(
        't_operator_info',
        _identity_id(),
        sa.Column('plmno_code', sa.String(length=20)),
        sa.Column('mcc_mnc', sa.String(length=20)),
        sa.Column('region', sa.String(length=100)),
        sa.Column('country', sa.String(length=100)),
        sa.Column('operator_name', sa.String(length=200)),
        sa.Column('country_code', sa.String(length=20)),
        sa.Column('mgt', sa.String(length=50)),
        schema='cm_data',
    )
    op.create_table(
        't_2g_3g_sunset',
        _identity_id(),
        sa.Column('plmno_code', sa.String(length=20)),
        sa.Column('country_name', sa.String(length=100)),
        sa.Column('operator_name', sa.String(length=200)),
        sa.Column('sunset_2g', sa.String(length=50)),
        sa.Column('sunset_3g', sa.String(length=50)),
        schema='cm_data',
    )
    op.create_table(
        't_countries_roaming_prohibited',
        _identity_id(),
        sa.Column('country_name', sa.String(length=100)),
        sa.Column('price_zone', sa.String(length=20)),
        schema='cm_data',
    )
    op.create_table(
        't_iot_launches_and_steering',
        _identity_id(),
        sa.Column('region', sa.String(length=100)),
        sa.Column('country', sa.String(length=100)),
        sa.Column('operator', sa.String(length=200)),
        sa.Column('mgt_cc_nc', sa.String(length=50)),
        sa.Column('mcc_mnc', sa.String(length=20)),
        sa.Column('tadig_code', sa.String(length=20)),
        *[
            sa.Column(name, sa.String(length=50))
            for name in (
                'gsm_date_outbound', 'gprs_date_outbound', 'umts_date_outbound',
                'camel_date_outbound', 'lte_date_outbound', '5g_nsa_date_outbound',
                'volte_date_outbound', 'lte_m_date_outbound', 'nb_iot_date_outbound',
                'nrtrde_date_outbound', 'steering',
            )
        ],
        sa.Column('comment', sa.Text()),
        sa.Column('psm_sup_lte_m', sa.String(length=20)),
        sa.Column('edrx_sup_lte_m', sa.String(length=20)),
        sa.Column('psm_sup_nbiot', sa.String(length=20)),
        sa.Column('edrx_sup_nbiot', sa.String(length=20)),
        schema='cm_data',
    )
    tcps = op.create_table(
        't_next_tcps',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tcp_name', sa.String(length=100), nullable=False),
        schema='cm_data',
    )
    op.create_table(
        't_pz_cut_off_points',
        _identity_id(),
        sa.Column('tcp_id', sa.Integer(), sa.ForeignKey('cm_data.t_next_tcps.id'), nullable=False),
        sa.Column('price_zone', sa.String(length=20)),
        sa.Column('cut_off_point', sa.String(length=50)),
        schema='cm_data',
    )

    # 4. Saved master lists
    op.create_table(
        't_master_config',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        *[
            sa.Column(name, sa.Integer(), sa.ForeignKey('cm_conf.t_data_imsi_donor_versions.id'), nullable=False)
            for name in MASTER_DATASETS
        ],
        sa.Column('version_name', sa.String(length=200), nullable=False),
        sa.Column('version_date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        schema='cm_conf',
    )
    op.create_table(
        't_master_data',
        _identity_id(),
        sa.Column(
            'master_config_id',
            sa.Integer(),
            sa.ForeignKey('cm_conf.t_master_config.id', ondelete='CASCADE'),
            nullable=False,
        ),
        *[sa.Column(name, sa.Text()) for name in MASTER_DATA_COLUMNS],
        schema='cm_data',
    )
    op.create_index('ix_t_master_data_master_config_id', 't_master_data', ['master_config_id'], schema='cm_data')

    # 5. Seed data
    op.bulk_insert(donors, IMSI_DONORS)
    op.bulk_insert(
        etl_conf,
        [
            {
                'id': dataset_id,
                'imsi_donor_id': donor_id,
                'data_set_name': display_name,
                'temp_table_name': f"cm_temp.{_staging_name(layout.permanent_table)}",
                'permanent_table_name': layout.permanent_table,
                'transfer_function_name': layout.routine_name,
            }
            for dataset_id, ((donor_id, display_name), layout) in enumerate(
                zip(DATASETS, DATASET_LAYOUTS), start=1
            )
        ],
    )
    op.bulk_insert(tcps, [{'id': n, 'tcp_name': f'TCP{n}'} for n in range(1, 6)])


def downgrade() -> None:
    """Drop everything created by upgrade."""
    op.drop_table('t_master_data', schema='cm_data')
    op.drop_table('t_master_config', schema='cm_conf')
    op.drop_table('t_pz_cut_off_points', schema='cm_data')
    op.drop_table('t_next_tcps', schema='cm_data')
    op.drop_table('t_iot_launches_and_steering', schema='cm_data')
    op.drop_table('t_countries_roaming_prohibited', schema='cm_data')
    op.drop_table('t_2g_3g_sunset', schema='cm_data')
    op.drop_table('t_operator_info', schema='cm_data')

    for layout in reversed(DATASET_LAYOUTS):
        schema, name = _split(layout.permanent_table)
        op.drop_table(name, schema=schema)
        op.drop_table(_staging_name(layout.permanent_table), schema='cm_temp')

    op.drop_table('t_data_imsi_donor_versions', schema='cm_conf')
    op.drop_table('t_data_etl_conf', schema='cm_conf')
    op.drop_table('t_imsi_donors', schema='cm_conf')
