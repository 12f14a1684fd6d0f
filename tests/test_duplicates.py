#!/usr/bin/env python3
"""
Tests for duplicate detection and client merging.
"""

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backoffice.duplicates import ClientMerger, find_duplicate_groups, find_similar_names
from backoffice.entity_resolution import ClientResolver, MatchInput, MatchMethod
from backoffice import database
from backoffice.database import init_db, make_session_factory
from backoffice.models import Client, ClientAccountMapping, ClientType


@pytest.fixture
def db():
    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def add_client(db, name, account_number=None, cpf=None, cnpj=None, active=True,
               client_type=ClientType.INDIVIDUAL):
    client = Client(
        name=name,
        account_number=account_number,
        cpf=cpf,
        cnpj=cnpj,
        active=active,
        client_type=client_type,
    )
    db.add(client)
    db.commit()
    return client


# --- Grouping ---

def test_groups_by_normalized_cpf_and_cnpj():
    clients = [
        SimpleNamespace(name="Maria", cpf="123.456.789-00", cnpj=None, client_type=ClientType.INDIVIDUAL),
        SimpleNamespace(name="Acme", cpf=None, cnpj="12.345.678/0001-90", client_type=ClientType.ORGANIZATION),
        SimpleNamespace(name="Maria S.", cpf="12345678900", cnpj=None, client_type=ClientType.INDIVIDUAL),
        SimpleNamespace(name="Acme Ltda", cpf=None, cnpj="12345678000190", client_type="pj"),
        SimpleNamespace(name="Solo", cpf="111.111.111-11", cnpj=None, client_type=ClientType.INDIVIDUAL),
        SimpleNamespace(name="No doc", cpf=None, cnpj=None, client_type=ClientType.INDIVIDUAL),
    ]
    groups = find_duplicate_groups(clients)

    assert [g.key for g in groups] == ["12345678900", "12345678000190"]
    assert [c.name for c in groups[0].clients] == ["Maria", "Maria S."]
    assert [c.name for c in groups[1].clients] == ["Acme", "Acme Ltda"]


def test_organization_cpf_is_ignored():
    clients = [
        SimpleNamespace(name="A", cpf="12345678900", cnpj=None, client_type=ClientType.ORGANIZATION),
        SimpleNamespace(name="B", cpf="12345678900", cnpj=None, client_type=ClientType.ORGANIZATION),
    ]
    assert find_duplicate_groups(clients) == []


def test_similar_names_sorted_by_score():
    clients = [
        SimpleNamespace(name="Maria Silva"),
        SimpleNamespace(name="Silva Maria"),
        SimpleNamespace(name="Maria Silvia"),
        SimpleNamespace(name="Pedro Alves"),
        SimpleNamespace(name=""),
    ]
    pairs = find_similar_names(clients, threshold=85)

    assert pairs[0].similarity_score == 100
    assert {pairs[0].client_a.name, pairs[0].client_b.name} == {"Maria Silva", "Silva Maria"}
    assert all(p.similarity_score >= 85 for p in pairs)
    assert all("Pedro Alves" not in (p.client_a.name, p.client_b.name) for p in pairs)
    scores = [p.similarity_score for p in pairs]
    assert scores == sorted(scores, reverse=True)


# --- Merging ---

def test_merge_deactivates_sources_and_maps_accounts(db):
    target = add_client(db, "Maria Silva", account_number="ACC-001", cpf="12345678900")
    source = add_client(db, "Maria S.", account_number="ACC-900", cpf="123.456.789-00")

    result = ClientMerger(db).merge(target, [source])

    assert result.accounts_mapped == 1
    assert result.source_clients_deactivated == 1
    assert result.source_clients_deleted == 0

    mapping = db.query(ClientAccountMapping).one()
    assert mapping.client_id == target.id
    assert mapping.account_number == "ACC-900"
    assert mapping.original_client_name == "Maria S."
    assert db.get(Client, source.id).active is False


def test_merge_can_delete_sources(db):
    target = add_client(db, "Acme", account_number="ACC-002", cnpj="12345678000190",
                        client_type=ClientType.ORGANIZATION)
    source = add_client(db, "Acme Ltda", account_number="ACC-902", cnpj="12345678000190",
                        client_type=ClientType.ORGANIZATION)
    source_id = source.id

    result = ClientMerger(db).merge(target, [source], delete_sources=True)

    assert result.source_clients_deleted == 1
    assert db.get(Client, source_id) is None
    assert db.query(ClientAccountMapping).one().client_id == target.id


def test_earlier_mappings_follow_the_new_target(db):
    first = add_client(db, "Maria", account_number="ACC-1")
    second = add_client(db, "Maria S.", account_number="ACC-2")
    third = add_client(db, "M. Silva", account_number="ACC-3")

    ClientMerger(db).merge(second, [third], delete_sources=True)
    ClientMerger(db).merge(first, [second], delete_sources=True)

    mappings = {m.account_number: m.client_id for m in db.query(ClientAccountMapping).all()}
    assert mappings == {"ACC-2": first.id, "ACC-3": first.id}


def test_merged_account_resolves_through_mapping(db):
    target = add_client(db, "Maria Silva", account_number="ACC-001")
    source = add_client(db, "Maria S.", account_number="ACC-900")
    ClientMerger(db).merge(target, [source], delete_sources=True)

    resolver = ClientResolver.from_session(db)
    result = resolver.resolve(MatchInput(account_number="acc-900"))

    assert result.client.id == target.id
    assert result.matched_by == MatchMethod.ACCOUNT_MAPPING


def test_merge_rejects_self_and_empty_sources(db):
    target = add_client(db, "Maria", account_number="ACC-001")

    with pytest.raises(ValueError):
        ClientMerger(db).merge(target, [target])
    with pytest.raises(ValueError):
        ClientMerger(db).merge(target, [])
    assert db.query(ClientAccountMapping).count() == 0


def test_get_db_closes_session(monkeypatch):
    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    monkeypatch.setattr(database, "SessionLocal", make_session_factory(engine))

    sessions = database.get_db()
    session = next(sessions)
    assert session.query(Client).count() == 0

    closed = []
    monkeypatch.setattr(session, "close", lambda: closed.append(True))
    with pytest.raises(StopIteration):
        next(sessions)
    assert closed == [True]
    engine.dispose()
