import logging
import time
from typing import Optional

from sqlalchemy import create_engine, text, Engine
from sqlalchemy.engine import make_url
from config import DATABASE_URL, DB_HOST, DB_NAME, DB_USER, DB_PASSWORD, DB_PORT

logger = logging.getLogger(__name__)


def build_database_url() -> Optional[str]:
    """
    Returns DATABASE_URL when set, otherwise assembles a PostgreSQL URL from the DB_* settings.
    """
    if DATABASE_URL:
        return DATABASE_URL

    # Validate required parameters
    if not all([DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME]):
        logger.error("❌ Missing required database connection parameters:")
        logger.error(f"   DB_USER: {'✅' if DB_USER else '❌ MISSING'}")
        logger.error(f"   DB_PASSWORD: {'✅' if DB_PASSWORD else '❌ MISSING'}")
        logger.error(f"   DB_HOST: {'✅' if DB_HOST else '❌ MISSING'}")
        logger.error(f"   DB_PORT: {'✅' if DB_PORT else '❌ MISSING'}")
        logger.error(f"   DB_NAME: {'✅' if DB_NAME else '❌ MISSING'}")
        return None

    return f'postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'


def create_db_engine(url: Optional[str] = None, max_retries: int = 3, retry_delay: int = 2) -> Optional[Engine]:
    """
    Creates a pooled engine and checks it with SELECT 1.

    The caller owns the engine and is responsible for disposing it. Returns None when
    the connection parameters are missing or every connection attempt fails.
    """
    url = url or build_database_url()
    if not url:
        return None

    safe_url = make_url(url).render_as_string(hide_password=True)
    logger.info(f"🔄 Establishing database connection to {safe_url}")

    engine_kwargs = {"pool_pre_ping": True}
    if url.startswith("postgresql"):
        engine_kwargs.update(
            pool_recycle=3600,
            pool_size=10,
            max_overflow=20,
            connect_args={
                "connect_timeout": 30,
                "application_name": "admin_analytics",
                "keepalives": 1,
                "keepalives_idle": 30,
                "keepalives_interval": 10,
                "keepalives_count": 5
            }
        )

    try:
        engine = create_engine(url, **engine_kwargs)
    except Exception as e:
        logger.error(f"❌ Error creating engine for {safe_url}: {e}")
        return None

    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).scalar()
            break
        except Exception as e:
            if attempt < max_retries - 1:
                logger.warning(f"⚠️ Connection attempt {attempt + 1}/{max_retries} failed: {e}. Retrying in {retry_delay}s...")
                time.sleep(retry_delay)
            else:
                logger.error(f"❌ All connection attempts to {safe_url} failed: {e}")
                engine.dispose()
                return None

    logger.info(f"✅ Database connection to {safe_url} established successfully.")
    return engine
