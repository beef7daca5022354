"""Health check router."""

import logging
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.dataset_layouts import TRANSFER_ROUTINES

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def migration_head() -> Optional[str]:
    """Head revision of the bundled alembic scripts, None when they are not shipped."""
    cfg_path = PROJECT_ROOT / "alembic.ini"
    script_location = PROJECT_ROOT / "alembic"
    if not cfg_path.exists() or not script_location.exists():
        return None

    config = Config(str(cfg_path))
    config.set_main_option("script_location", str(script_location))
    return ScriptDirectory.from_config(config).get_current_head()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Database reachability, migration state and the number of transfer routines."""
    db_ok = True
    schema_current: Optional[str] = None

    try:
        await db.execute(text("SELECT 1"))
        result = await db.execute(text("SELECT version_num FROM public.alembic_version"))
        schema_current = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.warning("Health check database query failed: %s", exc)
        db_ok = False

    schema_head = migration_head()

    return {
        "api_ok": True,
        "db_ok": db_ok,
        "schema_up_to_date": bool(schema_current and schema_current == schema_head),
        "schema_current": schema_current,
        "schema_head": schema_head,
        "transfer_routines": len(TRANSFER_ROUTINES),
    }
