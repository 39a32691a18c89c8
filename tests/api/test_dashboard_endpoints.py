# This file tests the dashboard summary and details endpoints.
# It exists to validate count aggregation and the admin gate on read-only admin views.

from __future__ import annotations

from tests.api.support import API, api_test_client, auth_headers, build_test_context, seed_admin


def _seed_content(client, headers: dict[str, str]) -> None:
    for name, category in (("Rahim", "Teacher"), ("Karim", "Teacher"), ("Salma", "Staff")):
        client.post(
            f"{API}/administration",
            data={"name": name, "category": category, "designation": "Senior"},
            headers=headers,
        )
    for name, level in (("Ayesha", "Five"), ("Nabil", "Six"), ("Rumi", "Six")):
        client.post(f"{API}/student", json={"name": name, "level": level}, headers=headers)
    client.post(f"{API}/announcement", json={"name": "Exam Notice"}, headers=headers)


def test_summary_counts_administration_categories_and_students() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    headers = auth_headers(context, admin["id"])

    with api_test_client(context=context) as client:
        _seed_content(client, headers)
        summary = client.get(f"{API}/dashboard/summary", headers=headers)
        students = client.get(f"{API}/dashboard/summary", params={"filterBy": "student"}, headers=headers)
        teachers = client.get(f"{API}/dashboard/summary", params={"filterBy": "Teacher"}, headers=headers)

    assert summary.status_code == 200
    assert summary.json()["data"] == {"Staff": 1, "Teacher": 2, "student": 3}
    assert students.json()["data"] == {"student": 3}
    assert teachers.json()["data"] == {"Teacher": 2}


def test_details_report_totals_for_every_collection() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    headers = auth_headers(context, admin["id"])

    with api_test_client(context=context) as client:
        _seed_content(client, headers)
        details = client.get(f"{API}/dashboard/details", headers=headers)
        only_students = client.get(f"{API}/dashboard/details", params={"collection": "student"}, headers=headers)

    assert details.status_code == 200
    data = details.json()["data"]
    assert data["admin"] == {"total": 1, "details": []}
    assert data["announcement"] == {"total": 1, "details": []}
    assert data["blog"] == {"total": 0, "details": []}
    assert data["administration"]["total"] == 3
    assert data["administration"]["details"] == [
        {"category": "Staff", "count": 1},
        {"category": "Teacher", "count": 2},
    ]
    assert "homePageCarousel" in data
    assert "admissionInformation" in data

    assert only_students.json()["data"] == {
        "student": {
            "total": 3,
            "details": [{"category": "Five", "count": 1}, {"category": "Six", "count": 2}],
        }
    }


def test_dashboard_requires_known_admin() -> None:
    context = build_test_context()
    seed_admin(context)

    with api_test_client(context=context) as client:
        anonymous = client.get(f"{API}/dashboard/summary")
        stranger = client.get(
            f"{API}/dashboard/details",
            headers=auth_headers(context, "admin-doesnotexist"),
        )

    assert anonymous.status_code == 401
    assert stranger.status_code == 403


def test_unknown_collection_falls_back_to_every_collection() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    headers = auth_headers(context, admin["id"])

    with api_test_client(context=context) as client:
        _seed_content(client, headers)
        everything = client.get(f"{API}/dashboard/details", headers=headers)
        unknown = client.get(f"{API}/dashboard/details", params={"collection": "payroll"}, headers=headers)

    assert unknown.status_code == 200
    assert unknown.json()["data"] == everything.json()["data"]
    assert {"admin", "student", "category", "notice", "result", "routine"} <= set(unknown.json()["data"])
