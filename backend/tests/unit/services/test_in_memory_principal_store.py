# tests/unit/services/test_in_memory_principal_store.py
from __future__ import annotations

import pytest
from tokenauth.models.enums import OAuthProviderType, Role
from tokenauth.services._shared.errors import ConflictError, NotFoundError
from tokenauth.services._shared.ports import InMemoryPrincipalStore


@pytest.fixture()
def store() -> InMemoryPrincipalStore:
    return InMemoryPrincipalStore()


@pytest.fixture()
def ann(store):
    return store.create(name="Ann", email="ann@example.com", password="secret12", confirmed=True)


def test_update_normalizes_and_keeps_untouched_fields(store, ann):
    principal = store.update(ann.id, name=" Anna ", role=Role.ADMIN)
    assert (principal.name, principal.role) == ("anna", Role.ADMIN)
    assert (principal.email, principal.confirmed) == ("ann@example.com", True)
    assert store.get(ann.id) == principal


def test_update_email_clears_confirmation(store, ann):
    principal = store.update(ann.id, email="New@Example.com")
    assert (principal.email, principal.confirmed) == ("new@example.com", False)


def test_update_email_taken_conflicts(store, ann):
    store.create(name="Bob", email="bob@example.com", password="secret12")
    with pytest.raises(ConflictError):
        store.update(ann.id, email="bob@example.com")


def test_update_password(store, ann):
    store.update(ann.id, password="another-1")
    assert store.find_by_credentials("ann@example.com", "another-1").id == ann.id


def test_delete_drops_principal_and_links(store):
    fed = store.find_or_create_federated(
        provider=OAuthProviderType.GOOGLE, email="fed@example.com", name="Fed"
    )
    assert store.delete(fed.id) == fed
    assert store.get(fed.id) is None
    assert store.links == set()


@pytest.mark.parametrize("method", ["update", "delete"])
def test_missing_principal(store, method):
    with pytest.raises(NotFoundError):
        getattr(store, method)("missing-id")
