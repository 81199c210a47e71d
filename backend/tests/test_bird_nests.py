from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import select

from backend.app.core import errors
from backend.app.models import BirdNest
from backend.app.services import bird_nests


def _snapshot(session, owner_id: str) -> list[tuple]:
    session.expire_all()
    rows = bird_nests.list_for_owner(session, owner_id)
    return [(row.id, row.name, row.hatch_date, row.notes) for row in rows]


def test_replace_all_swaps_the_whole_set(session, regular_user) -> None:
    bird_nests.replace_all(
        session,
        regular_user.id,
        [{"id": "a", "name": "First"}, {"id": "b", "name": "Second"}],
    )

    saved = bird_nests.replace_all(
        session,
        regular_user.id,
        [{"id": "c", "name": "Third", "hatch_date": "2024-05-01", "notes": "warm"}],
    )

    assert [(nest.id, nest.name, nest.hatch_date, nest.notes) for nest in saved] == [
        ("c", "Third", date(2024, 5, 1), "warm")
    ]
    assert _snapshot(session, regular_user.id) == [("c", "Third", date(2024, 5, 1), "warm")]


def test_replace_all_fills_defaults_and_generates_ids(session, regular_user) -> None:
    saved = bird_nests.replace_all(session, regular_user.id, [{}, {"name": "Named", "hatch_date": ""}])

    assert len(saved) == 2
    assert all(nest.id for nest in saved)
    assert saved[0].id != saved[1].id
    assert (saved[0].name, saved[0].notes, saved[0].hatch_date) == ("", "", None)
    assert saved[1].name == "Named"
    assert saved[1].hatch_date is None


def test_replace_all_keeps_submitted_order(session, regular_user) -> None:
    names = ["zulu", "alpha", "mike"]
    saved = bird_nests.replace_all(session, regular_user.id, [{"name": name} for name in names])
    assert [nest.name for nest in saved] == names


def test_replace_all_is_idempotent(session, regular_user) -> None:
    records = [
        {"id": "n1", "name": "One", "hatch_date": date(2024, 1, 2)},
        {"id": "n2", "name": "Two", "notes": "check humidity"},
    ]
    bird_nests.replace_all(session, regular_user.id, records)
    first = _snapshot(session, regular_user.id)
    bird_nests.replace_all(session, regular_user.id, records)
    assert _snapshot(session, regular_user.id) == first


def test_replace_all_with_empty_list_clears(session, regular_user) -> None:
    bird_nests.replace_all(session, regular_user.id, [{"name": "gone"}])
    assert bird_nests.replace_all(session, regular_user.id, []) == []
    assert _snapshot(session, regular_user.id) == []


def test_failed_replace_rolls_back_everything(session, regular_user) -> None:
    bird_nests.replace_all(session, regular_user.id, [{"id": "keep", "name": "Original"}])
    before = _snapshot(session, regular_user.id)

    with pytest.raises(errors.StorageError):
        bird_nests.replace_all(
            session,
            regular_user.id,
            [{"id": "dup", "name": "A"}, {"id": "dup", "name": "B"}],
        )

    assert _snapshot(session, regular_user.id) == before


@pytest.mark.parametrize("records", [None, "nests", {"id": "x"}, 42])
def test_replace_all_requires_a_sequence(session, regular_user, records) -> None:
    with pytest.raises(errors.ValidationError):
        bird_nests.replace_all(session, regular_user.id, records)


def test_replace_all_rejects_bad_hatch_date(session, regular_user) -> None:
    with pytest.raises(errors.ValidationError):
        bird_nests.replace_all(session, regular_user.id, [{"hatch_date": "soon"}])


def test_replace_all_accepts_timestamps_for_hatch_date(session, regular_user) -> None:
    saved = bird_nests.replace_all(
        session,
        regular_user.id,
        [{"hatch_date": "2024-03-01T10:00:00.000Z"}, {"hatch_date": datetime(2024, 4, 2, 8, 30)}],
    )
    assert [nest.hatch_date for nest in saved] == [date(2024, 3, 1), date(2024, 4, 2)]


def test_owners_are_isolated(session, make_user) -> None:
    alice = make_user()
    bob = make_user()
    bird_nests.replace_all(session, alice.id, [{"name": "alice nest"}])
    bird_nests.replace_all(session, bob.id, [{"name": "bob nest"}])

    bird_nests.replace_all(session, alice.id, [])

    assert _snapshot(session, alice.id) == []
    assert [row[1] for row in _snapshot(session, bob.id)] == ["bob nest"]
    owners = session.execute(select(BirdNest.owner_id)).scalars().all()
    assert owners == [bob.id]


def test_nest_routes_require_login(app) -> None:
    assert app.get("/api/bird-nests").status_code == 401
    assert app.put("/api/bird-nests", json={"nests": []}).status_code == 401


def test_nest_sync_over_http(app, user_headers) -> None:
    payload = {
        "nests": [
            {"id": "1700000000000", "name": "Nest A", "hatchDate": "2024-03-01", "notes": "", "dirty": True},
            {"name": "Nest B", "hatchDate": ""},
        ]
    }
    response = app.put("/api/bird-nests", json=payload, headers=user_headers)
    assert response.status_code == 200
    nests = response.json()["nests"]
    assert [nest["name"] for nest in nests] == ["Nest A", "Nest B"]
    assert nests[0]["id"] == "1700000000000"
    assert nests[0]["hatchDate"] == "2024-03-01"
    assert nests[0]["expectedHatchDate"] == "2024-03-13"
    assert nests[1]["hatchDate"] is None
    assert nests[1]["id"]

    fetched = app.get("/api/bird-nests", headers=user_headers)
    assert fetched.status_code == 200
    assert fetched.json()["nests"] == nests


def test_nest_sync_rejects_non_array(app, user_headers) -> None:
    response = app.put("/api/bird-nests", json={"nests": "oops"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request payload"}


def test_nest_sync_failure_returns_500_and_keeps_data(app, user_headers) -> None:
    app.put("/api/bird-nests", json={"nests": [{"id": "k", "name": "Keep"}]}, headers=user_headers)

    response = app.put(
        "/api/bird-nests",
        json={"nests": [{"id": "d", "name": "x"}, {"id": "d", "name": "y"}]},
        headers=user_headers,
    )
    assert response.status_code == 500
    assert response.json() == {"message": "Could not save bird nest data"}

    nests = app.get("/api/bird-nests", headers=user_headers).json()["nests"]
    assert [(nest["id"], nest["name"]) for nest in nests] == [("k", "Keep")]


def test_nest_sync_accepts_timestamp_hatch_dates(app, user_headers) -> None:
    response = app.put(
        "/api/bird-nests",
        json={"nests": [{"name": "Nest C", "hatchDate": "2024-03-01T10:00:00.000Z"}]},
        headers=user_headers,
    )
    assert response.status_code == 200
    nest = response.json()["nests"][0]
    assert nest["hatchDate"] == "2024-03-01"
    assert nest["expectedHatchDate"] == "2024-03-13"


def test_nest_sync_rejects_unparseable_hatch_date(app, user_headers) -> None:
    response = app.put("/api/bird-nests", json={"nests": [{"hatchDate": "next week"}]}, headers=user_headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid hatch date"}
