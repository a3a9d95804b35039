"""Tests for BaseDomainModel camelCase serialization."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

import pytest

from docdrift.shared.domain.base_model import BaseDomainModel, to_camel_case, to_snake_case


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Child(BaseDomainModel):
    child_name: str
    color: Color = Color.RED


@dataclass
class Parent(BaseDomainModel):
    parent_id: str
    created_at: datetime
    week_start: date
    children: List[Child] = field(default_factory=list)
    by_key: Dict[str, Child] = field(default_factory=dict)
    favourite: Optional[Child] = None
    maybe_count: int | None = None


class TestCaseConversion:
    def test_round_trip(self):
        assert to_camel_case("total_exports") == "totalExports"
        assert to_snake_case("totalExports") == "total_exports"
        assert to_snake_case("") == ""


class TestBaseDomainModel:
    def test_nested_round_trip(self):
        parent = Parent(
            parent_id="p1",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            week_start=date(2024, 1, 1),
            children=[Child("a"), Child("b", Color.BLUE)],
            by_key={"x": Child("x")},
            favourite=Child("f"),
            maybe_count=3,
        )
        data = parent.to_json()
        assert data["parentId"] == "p1"
        assert data["createdAt"] == "2024-01-01T00:00:00+00:00"
        assert data["weekStart"] == "2024-01-01"
        assert data["children"][1] == {"childName": "b", "color": "blue"}

        restored = Parent.from_json(data)
        assert restored == parent
        assert restored.children[1].color is Color.BLUE

    def test_defaults_fill_missing_keys(self):
        parent = Parent.from_json({"parentId": "p", "createdAt": "2024-01-01T00:00:00", "weekStart": "2024-01-01"})
        assert parent.children == []
        assert parent.favourite is None

    def test_missing_required_field(self):
        with pytest.raises(ValueError, match="parentId"):
            Parent.from_json({"createdAt": "2024-01-01T00:00:00"})
