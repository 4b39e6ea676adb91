"""Tests for the terms gate."""

import pytest

from application.services.terms import TERMS_VERSION, TermsService, terms_document
from domain.exceptions import TermsNotAcceptedError


@pytest.fixture
def terms(account_repo) -> TermsService:
    return TermsService(account_repo)


async def test_unaccepted_account_is_gated(terms, make_account):
    account = await make_account()
    with pytest.raises(TermsNotAcceptedError):
        terms.require_accepted(account)


async def test_accept_defaults_to_current_version(terms, make_account, account_repo):
    account = await make_account()

    await terms.accept(account)

    stored = await account_repo.get_by_id(account.id)
    assert stored.terms_accepted is True
    assert stored.terms_version == TERMS_VERSION == "1.0"
    assert stored.terms_accepted_at is not None
    terms.require_accepted(stored)


async def test_accept_stores_given_version_verbatim(terms, make_account, account_repo):
    account = await make_account()
    await terms.accept(account, "2.0")
    assert (await account_repo.get_by_id(account.id)).terms_version == "2.0"


def test_terms_document_shape():
    doc = terms_document()
    assert doc["version"] == "1.0"
    assert doc["lastUpdated"] == "2025-12-09"
    assert len(doc["sections"]) == 10
    assert doc["summary"]
