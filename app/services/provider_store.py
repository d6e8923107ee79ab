from typing import Any, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from app.core.errors import NotFoundError, PersistenceError
from app.models.provider import Provider


class ProviderStore:
    """CRUD over provider rows. Any database failure rolls back and raises PersistenceError."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, provider_id: Optional[str], exc: SQLAlchemyError):
        self.db.rollback()
        logger.error(f"[providers] {action} failed id={provider_id}: {exc}")
        raise PersistenceError(
            f"Record store unavailable during {action}",
            details={"provider_id": provider_id},
        ) from exc

    def get(self, provider_id: str) -> Provider:
        try:
            provider = self.db.get(Provider, provider_id)
        except SQLAlchemyError as e:
            self._fail("get", provider_id, e)

        if provider is None:
            raise NotFoundError("Provider not found", details={"provider_id": provider_id})
        return provider

    def list_all(self, approved: Optional[bool] = None) -> List[Provider]:
        query = self.db.query(Provider)
        if approved is not None:
            query = query.filter(Provider.approved == approved)
        try:
            return query.order_by(Provider.created_at.desc()).all()
        except SQLAlchemyError as e:
            self._fail("list", None, e)

    def create(self, data: dict[str, Any]) -> Provider:
        data.setdefault("media", {"images": [], "videos": []})
        provider = Provider(**data)
        self.db.add(provider)
        return self.save(provider)

    def save(self, provider: Provider) -> Provider:
        # JSON column: in-place edits are invisible to the unit of work
        if "media" in provider.__dict__:
            flag_modified(provider, "media")
        try:
            self.db.commit()
            self.db.refresh(provider)
        except SQLAlchemyError as e:
            self._fail("save", provider.id, e)
        return provider

    def delete(self, provider_id: str) -> None:
        provider = self.get(provider_id)
        try:
            self.db.delete(provider)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", provider_id, e)
        logger.info(f"[providers] deleted id={provider_id}")
