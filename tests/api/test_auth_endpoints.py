# This file tests admin signup, login, password reset, and account removal endpoints.
# It exists to validate credential handling and the same-admin rule for account changes.

from __future__ import annotations

from src.api.security import decode_access_token
from tests.api.support import (
    API,
    TEST_PASSWORD,
    api_test_client,
    auth_headers,
    build_test_config,
    build_test_context,
    seed_admin,
)

SIGNUP = {
    "name": "Head Teacher",
    "userName": "headteacher",
    "password": TEST_PASSWORD,
    "confirmPassword": TEST_PASSWORD,
}


def test_signup_then_login_issues_token() -> None:
    context = build_test_context()

    with api_test_client(context=context) as client:
        signup = client.post(f"{API}/auth/signup", json=SIGNUP)
        login = client.post(
            f"{API}/auth/login",
            json={"userName": "headteacher", "password": TEST_PASSWORD},
        )

    assert signup.status_code == 200
    assert signup.json()["message"] == "headteacher created successfully"
    signup_data = signup.json()["data"]
    assert signup_data["userName"] == "headteacher"
    assert "id" not in signup_data
    assert "passwordHash" not in signup_data

    assert login.status_code == 200
    login_data = login.json()["data"]
    assert login_data["name"] == "Head Teacher"
    claims = decode_access_token(login_data["token"], context.config)
    assert claims["sub"] == context.admins.find_by_user_name("headteacher")["id"]
    assert claims["userName"] == "headteacher"


def test_passwords_are_stored_hashed() -> None:
    context = build_test_context()
    admin = seed_admin(context)

    assert admin["password_hash"] != TEST_PASSWORD
    assert admin["password_hash"].startswith("$pbkdf2-sha256$")


def test_signup_rejects_duplicates_and_mismatched_passwords() -> None:
    context = build_test_context()
    seed_admin(context)

    with api_test_client(context=context) as client:
        duplicate = client.post(f"{API}/auth/signup", json=SIGNUP)
        mismatch = client.post(
            f"{API}/auth/signup",
            json={**SIGNUP, "userName": "another", "confirmPassword": "different-pass"},
        )

    assert duplicate.status_code == 422
    assert duplicate.json()["message"] == "headteacher already exists"
    assert mismatch.status_code == 422
    assert mismatch.json()["message"] == "Password did not match"


def test_signup_can_be_disabled() -> None:
    context = build_test_context(config=build_test_config(signup_enabled=False))

    with api_test_client(context=context) as client:
        response = client.post(f"{API}/auth/signup", json=SIGNUP)

    assert response.status_code == 403
    assert context.admins.count() == 0


def test_login_with_wrong_password_is_unauthorized() -> None:
    context = build_test_context()
    seed_admin(context)

    with api_test_client(context=context) as client:
        wrong = client.post(f"{API}/auth/login", json={"userName": "headteacher", "password": "wrong-pass1"})
        unknown = client.post(f"{API}/auth/login", json={"userName": "nobody", "password": TEST_PASSWORD})

    for response in (wrong, unknown):
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"


def test_login_body_is_validated() -> None:
    with api_test_client() as client:
        response = client.post(f"{API}/auth/login", json={"userName": "ab"})

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["data"]["errors"]}
    assert fields == {"userName", "password"}


def test_reset_password_flow() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    headers = auth_headers(context, admin["id"])
    url = f"{API}/auth/reset-password/{admin['id']}"

    with api_test_client(context=context) as client:
        wrong_old = client.put(
            url,
            json={"oldPassword": "wrong-pass1", "newPassword": "new-pass-99", "confirmNewPassword": "new-pass-99"},
            headers=headers,
        )
        mismatch = client.put(
            url,
            json={"oldPassword": TEST_PASSWORD, "newPassword": "new-pass-99", "confirmNewPassword": "new-pass-00"},
            headers=headers,
        )
        reset = client.put(
            url,
            json={"oldPassword": TEST_PASSWORD, "newPassword": "new-pass-99", "confirmNewPassword": "new-pass-99"},
            headers=headers,
        )
        login = client.post(f"{API}/auth/login", json={"userName": "headteacher", "password": "new-pass-99"})

    assert wrong_old.status_code == 422
    assert wrong_old.json()["message"] == "Wrong password"
    assert mismatch.status_code == 422
    assert reset.status_code == 200
    assert login.status_code == 200


def test_reset_password_for_another_admin_is_forbidden() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    other = seed_admin(context, name="Deputy Head", user_name="deputyhead")

    with api_test_client(context=context) as client:
        response = client.put(
            f"{API}/auth/reset-password/{other['id']}",
            json={"oldPassword": TEST_PASSWORD, "newPassword": "new-pass-99", "confirmNewPassword": "new-pass-99"},
            headers=auth_headers(context, admin["id"]),
        )

    assert response.status_code == 403


def test_delete_user_removes_account_and_its_access() -> None:
    context = build_test_context()
    admin = seed_admin(context)
    other = seed_admin(context, name="Deputy Head", user_name="deputyhead")
    headers = auth_headers(context, admin["id"])

    with api_test_client(context=context) as client:
        not_self = client.delete(f"{API}/auth/delete-user/{other['id']}", headers=headers)
        deleted = client.delete(f"{API}/auth/delete-user/{admin['id']}", headers=headers)
        afterwards = client.post(f"{API}/announcement", json={"name": "Exam Notice"}, headers=headers)

    assert not_self.status_code == 403
    assert deleted.status_code == 200
    assert context.admins.find_by_id(admin["id"]) is None
    assert context.admins.find_by_id(other["id"]) is not None
    assert afterwards.status_code == 403
