"""Tests for the invitation code generator."""

import asyncio
import re
from unittest.mock import AsyncMock, patch

import pytest
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import GenerationExhausted
from app.services.invitation_codes import (
    InvitationCodeGenerator,
    draw_code,
    normalize_code,
)
from tests.mocks.mongodb import create_in_memory_db, create_mock_collection, create_mock_db

MODULE = "app.services.invitation_codes"
CODE_PATTERN = re.compile(r"^[A-Z0-9]{8}$")


class TestDrawCode:
    def test_length_and_charset(self):
        for _ in range(50):
            assert CODE_PATTERN.match(draw_code())

    def test_custom_length(self):
        assert len(draw_code(12)) == 12


class TestNormalizeCode:
    def test_upper_and_trim(self):
        assert normalize_code(" abcd1234 ") == "ABCD1234"


class TestGenerate:
    def test_claims_code_for_project(self):
        db = create_in_memory_db()
        generator = InvitationCodeGenerator(db)

        code = asyncio.run(generator.generate("project-1"))

        assert CODE_PATTERN.match(code)
        assert db.invitation_codes.docs[code]["project_id"] == "project-1"

    def test_codes_are_unique(self):
        db = create_in_memory_db()
        generator = InvitationCodeGenerator(db)

        async def run():
            return await asyncio.gather(*(generator.generate(f"p-{i}") for i in range(25)))

        codes = asyncio.run(run())
        assert len(set(codes)) == 25

    def test_retries_after_collision(self):
        db = create_in_memory_db()
        asyncio.run(db.invitation_codes.insert_one({"_id": "TAKEN000", "project_id": "other"}))
        generator = InvitationCodeGenerator(db)

        with patch(f"{MODULE}.draw_code", side_effect=["TAKEN000", "FRESH111"]):
            code = asyncio.run(generator.generate("project-1"))

        assert code == "FRESH111"

    def test_exhaustion_after_max_attempts(self):
        collection = create_mock_collection()
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("dup"))
        db = create_mock_db({"invitation_codes": collection})
        generator = InvitationCodeGenerator(db, max_attempts=5)

        with pytest.raises(GenerationExhausted) as exc_info:
            asyncio.run(generator.generate("project-1"))

        assert exc_info.value.details == {"attempts": 5}
        assert collection.insert_one.await_count == 5

    def test_zero_attempts_is_honoured(self):
        collection = create_mock_collection()
        db = create_mock_db({"invitation_codes": collection})

        with pytest.raises(GenerationExhausted) as exc_info:
            asyncio.run(InvitationCodeGenerator(db, max_attempts=0).generate("project-1"))

        assert exc_info.value.details == {"attempts": 0}
        collection.insert_one.assert_not_awaited()

    def test_other_errors_are_not_retried(self):
        collection = create_mock_collection()
        collection.insert_one = AsyncMock(side_effect=RuntimeError("connection lost"))
        db = create_mock_db({"invitation_codes": collection})

        with pytest.raises(RuntimeError):
            asyncio.run(InvitationCodeGenerator(db).generate("project-1"))

        assert collection.insert_one.await_count == 1
