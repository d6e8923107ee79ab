"""Tests for the provider record store."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import provider_data
from app.core.errors import NotFoundError, PersistenceError


class TestProviderStore:
    """Tests for ProviderStore CRUD."""

    def test_create_defaults(self, store) -> None:
        """New providers start unapproved with empty media."""
        provider = store.create(provider_data())
        assert provider.id
        assert provider.approved is False
        assert provider.media == {"images": [], "videos": []}

    def test_get_missing(self, store) -> None:
        """Unknown id raises NotFound."""
        with pytest.raises(NotFoundError):
            store.get("missing")

    def test_list_filters_by_approval(self, store) -> None:
        """list_all can filter on the approved flag."""
        store.create(provider_data(name="A"))
        store.create(provider_data(name="B", approved=True))

        assert {p.name for p in store.list_all()} == {"A", "B"}
        assert [p.name for p in store.list_all(approved=True)] == ["B"]
        assert [p.name for p in store.list_all(approved=False)] == ["A"]

    def test_delete(self, store) -> None:
        """Deleted providers are gone; deleting twice raises NotFound."""
        provider = store.create(provider_data())
        store.delete(provider.id)
        with pytest.raises(NotFoundError):
            store.delete(provider.id)

    def test_commit_failure_becomes_persistence_error(self, store, db_session) -> None:
        """Database failures roll back and surface as PersistenceError."""
        provider = store.create(provider_data())
        provider.city = "Szeged"

        with patch.object(db_session, "commit", side_effect=OperationalError("commit", {}, Exception("down"))):
            with pytest.raises(PersistenceError):
                store.save(provider)

        assert store.get(provider.id).city == "Budapest"
