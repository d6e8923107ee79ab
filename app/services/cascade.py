"""
Provider-level cascades.

Approval and deletion both purge the provider's media before the
transition commits. A partially failed purge is logged and never blocks
the transition.
"""
from typing import Any, Optional

from loguru import logger

from app.core.errors import ValidationError
from app.models.provider import Provider
from app.services.media_lifecycle import MediaLifecycleManager, PurgeResult
from app.services.provider_store import ProviderStore


_REQUIRED_FIELDS = {
    "name", "email", "category", "min_price", "max_price",
    "country", "city", "postal_code", "street", "house_number",
}


class ProviderCascade:
    def __init__(self, store: ProviderStore, media: MediaLifecycleManager):
        self.store = store
        self.media = media

    def _log_discrepancy(self, action: str, provider_id: str, result: PurgeResult) -> None:
        if not result.clean:
            logger.warning(
                f"[cascade] {action} provider={provider_id} proceeding with "
                f"{result.failed}/{result.attempted} media left in store: {result.failed_urls}"
            )

    def approve(self, provider_id: str) -> Provider:
        provider = self.store.get(provider_id)
        if provider.approved:
            logger.debug(f"[cascade] provider={provider_id} already approved")
            return provider

        logger.info(f"[cascade] provider={provider_id} approved, purging media")
        result = self.media.purge_all(provider_id)
        self._log_discrepancy("approve", provider_id, result)

        provider = self.store.get(provider_id)
        provider.approved = True
        return self.store.save(provider)

    def update(self, provider_id: str, changes: dict[str, Any]) -> Provider:
        """Apply profile edits; ``approved=True`` routes through ``approve`` first."""
        changes = dict(changes)
        changes.pop("media", None)
        approved: Optional[bool] = changes.pop("approved", None)

        provider = self.store.get(provider_id)
        if approved is False and provider.approved:
            raise ValidationError(
                "Approval cannot be revoked",
                details={"provider_id": provider_id},
            )

        cleared = sorted(k for k, v in changes.items() if v is None and k in _REQUIRED_FIELDS)
        if cleared:
            raise ValidationError("Required fields cannot be cleared", details={"fields": cleared})

        min_price = changes.get("min_price", provider.min_price)
        max_price = changes.get("max_price", provider.max_price)
        if min_price > max_price:
            raise ValidationError("minPrice must not exceed maxPrice")

        # edits are validated before approval so a rejected update never purges
        if approved:
            provider = self.approve(provider_id)

        if changes:
            for key, value in changes.items():
                setattr(provider, key, value)
            provider = self.store.save(provider)

        return provider

    def delete(self, provider_id: str) -> PurgeResult:
        # NotFound from the purge propagates before any record delete
        result = self.media.purge_all(provider_id)
        self._log_discrepancy("delete", provider_id, result)

        self.store.delete(provider_id)
        logger.info(f"[cascade] provider={provider_id} and associated media deleted")
        return result
