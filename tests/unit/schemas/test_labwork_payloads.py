"""Unit tests for reading backend payloads into labwork schemas."""

from datetime import date, time
from uuid import UUID

import pytest
from pydantic import ValidationError

from lwm_schemas.labwork import Blacklist, TimetableEntry
from tests.helpers.labwork_factory import ROOM_ID


@pytest.mark.unit
def test_camel_case_payload_is_accepted() -> None:
    entry = TimetableEntry.model_validate(
        {"room": ROOM_ID, "dayIndex": 2, "start": time(8, 0), "end": time(9, 30)}
    )

    assert entry.day_index == 2
    assert entry.model_dump(by_alias=True)["dayIndex"] == 2
    assert "day_index" in entry.model_dump()


@pytest.mark.unit
def test_unknown_payload_fields_are_ignored() -> None:
    blacklist = Blacklist.model_validate(
        {
            "id": UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0401"),
            "label": "Tag der Deutschen Einheit",
            "day": date(2026, 10, 3),
            "isGlobal": True,
            "lastModified": "2026-09-01",
        }
    )

    assert blacklist.is_global


@pytest.mark.unit
def test_partial_day_block_needs_both_bounds() -> None:
    with pytest.raises(ValidationError):
        Blacklist(
            id=UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0401"),
            label="Wartung",
            day=date(2026, 10, 3),
            start=time(8, 0),
        )
