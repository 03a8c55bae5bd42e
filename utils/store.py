import json
from datetime import timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import logger
from core.database import create_db_engine, init_db, make_session_factory
from core.errors import PersistenceError
from models.submission import Submission


def dump_list(values: Optional[Sequence[str]]) -> str:
    return json.dumps([str(v) for v in (values or [])], ensure_ascii=False)


def load_list(raw: Optional[str]) -> List[str]:
    """Parse a stored JSON array; anything absent or malformed becomes []."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
        return []
    return data


def submission_to_dict(rec: Submission) -> Dict[str, Any]:
    return {
        "id": rec.id,
        "name": rec.name,
        "contact": rec.contact,
        "email": rec.email or "",
        "product_links": load_list(rec.product_links),
        "image_urls": load_list(rec.image_urls),
        # SQLite CURRENT_TIMESTAMP is UTC
        "created_at": rec.created_at.replace(tzinfo=timezone.utc).isoformat() if rec.created_at else None,
        "status": rec.status,
    }


class SubmissionStore:
    """Single-table persistence for product submissions."""

    def __init__(self, engine: Optional[Engine] = None, url: Optional[str] = None):
        self.engine = engine if engine is not None else (create_db_engine(url) if url else create_db_engine())
        self._session_factory = make_session_factory(self.engine)

    def initialize(self) -> None:
        try:
            init_db(self.engine)
        except (SQLAlchemyError, OSError) as ex:
            raise PersistenceError(f"Failed to initialize submissions table: {ex}", ex) from ex

    def insert(
        self,
        name: str,
        contact: str,
        email: str,
        links: Sequence[str],
        image_urls: Sequence[str],
    ) -> int:
        db = self._session_factory()
        try:
            rec = Submission(
                name=name,
                contact=contact,
                email=email or "",
                product_links=dump_list(links),
                image_urls=dump_list(image_urls),
            )
            db.add(rec)
            db.commit()
            logger.info(f"[store] inserted submission id={rec.id}")
            return rec.id
        except (SQLAlchemyError, OSError) as ex:
            db.rollback()
            raise PersistenceError(f"Failed to save submission: {ex}", ex) from ex
        finally:
            db.close()

    def list_all(self) -> List[Dict[str, Any]]:
        db = self._session_factory()
        try:
            rows = (
                db.query(Submission)
                .order_by(Submission.created_at.desc(), Submission.id.desc())
                .all()
            )
            return [submission_to_dict(r) for r in rows]
        except (SQLAlchemyError, OSError) as ex:
            raise PersistenceError(f"Failed to list submissions: {ex}", ex) from ex
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
