"""Tests for the invitation code registry."""

import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from app.repositories.invitation_codes import InvitationCodeRepository
from tests.mocks.mongodb import create_in_memory_db


def test_claim_stores_code_as_id():
    db = create_in_memory_db()
    asyncio.run(InvitationCodeRepository(db).claim("ABCD1234", "project-1"))
    assert db.invitation_codes.docs["ABCD1234"]["project_id"] == "project-1"


def test_second_claim_fails():
    db = create_in_memory_db()
    repo = InvitationCodeRepository(db)
    asyncio.run(repo.claim("ABCD1234", "project-1"))

    with pytest.raises(DuplicateKeyError):
        asyncio.run(repo.claim("ABCD1234", "project-2"))


def test_release_frees_code():
    db = create_in_memory_db()
    repo = InvitationCodeRepository(db)
    asyncio.run(repo.claim("ABCD1234", "project-1"))
    asyncio.run(repo.release("ABCD1234"))
    asyncio.run(repo.claim("ABCD1234", "project-2"))
    assert db.invitation_codes.docs["ABCD1234"]["project_id"] == "project-2"
