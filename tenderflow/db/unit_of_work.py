from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from tenderflow.core.errors import ConflictError, DependencyFailure, TenderflowError
from tenderflow.core.logging_config import logger


@asynccontextmanager
async def unit_of_work(db: AsyncSession, label: str, commit: bool = True):
    """Runs guards and writes of one operation as a single transaction.

    Everything inside either commits together or is rolled back, and
    storage-level failures are translated into domain errors.
    """
    try:
        yield db
        if commit:
            await db.commit()
    except TenderflowError:
        await db.rollback()
        raise
    except StaleDataError as e:
        await db.rollback()
        logger.warning(f"{label}: concurrent modification detected: {e}")
        raise ConflictError("Document was modified concurrently, reload and retry") from e
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"{label}: integrity conflict: {e}")
        raise ConflictError("Conflicting record already exists, reload and retry") from e
    except (OperationalError, InterfaceError, ConnectionError, OSError) as e:
        await db.rollback()
        logger.error(f"{label}: database unavailable: {e}")
        raise DependencyFailure("Database is unavailable, retry later") from e
    except Exception:
        await db.rollback()
        raise
