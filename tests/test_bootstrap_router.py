"""
HTTP tests for the session bootstrap bridge.
"""

import time

import jwt
import pytest

from club_auth.routers.bootstrap import get_bootstrap_service

from tests.conftest import JWT_SECRET, make_token

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


class TestBootstrapEndpoint:

    @pytest.fixture
    def member(self, make_user):
        return make_user(email="ada@example.com")

    @pytest.fixture
    def credential(self, store, member):
        return store.add(user_id=member.id, credential_id="Y3JlZC8x+w==", public_key="a2V5")

    def _post(self, client, path, headers, body):
        return client.post(path, json=body, headers=headers)

    def test_preflight(self, client, bootstrap_path):
        response = client.options(bootstrap_path)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == CORS_ALLOW_HEADERS

    def test_bootstrap(self, client, bootstrap_path, anon_headers, credential, member, identity):
        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["content-type"].startswith("application/json")
        body = response.json()
        assert body["email"] == "ada@example.com"
        assert body["email_otp"] in identity.issued
        assert body["token"] == f"hashed-{body['email_otp']}"
        assert body["user"] == {"id": str(member.auth_id), "email": "ada@example.com"}

    def test_missing_api_key(self, client, bootstrap_path, credential, member, identity):
        response = self._post(client, bootstrap_path, {}, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid API key"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert identity.issue_calls == []

    @pytest.mark.parametrize("api_key", [
        make_token("service_role"),
        make_token("authenticated"),
        jwt.encode({"role": "anon", "exp": int(time.time()) - 60}, JWT_SECRET, algorithm="HS256"),
        jwt.encode({"role": "anon"}, "some-other-secret-of-sufficient-length", algorithm="HS256"),
        "not-a-jwt",
    ])
    def test_rejected_api_key(self, client, bootstrap_path, api_key, credential, member, identity):
        response = self._post(client, bootstrap_path, {"apikey": api_key}, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid API key"
        assert identity.issue_calls == []

    def test_bearer_only_api_key(self, client, bootstrap_path, settings, credential, member):
        headers = {"Authorization": f"Bearer {settings.supabase_anon_key}"}
        response = self._post(client, bootstrap_path, headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 200

    def test_empty_body(self, client, bootstrap_path, anon_headers):
        response = self._post(client, bootstrap_path, anon_headers, {})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: userId and credentialId"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_non_object_body(self, client, bootstrap_path, anon_headers):
        response = self._post(client, bootstrap_path, anon_headers, ["userId", "credentialId"])

        assert response.status_code == 400

    def test_malformed_json(self, client, bootstrap_path, anon_headers):
        response = client.post(
            bootstrap_path,
            content=b"{not json",
            headers={**anon_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_inactive_credential(self, client, bootstrap_path, anon_headers, credential, member, store):
        store.revoke("Y3JlZC8x+w==")

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or inactive credential"}

    def test_ownership_mismatch(self, client, bootstrap_path, anon_headers, credential, make_user, identity):
        intruder = make_user()

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(intruder.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 403
        assert response.json() == {"error": "Credential does not belong to this user"}
        assert identity.issue_calls == []

    def test_inactive_user(self, client, bootstrap_path, anon_headers, credential, member, db, identity):
        member.is_active = False
        db.commit()

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 404
        assert response.json() == {"error": "User not found or inactive"}
        assert identity.issue_calls == []

    def test_upstream_failure_hides_details(self, client, bootstrap_path, anon_headers, credential, member, identity):
        identity.fail_issue = "Database error finding user"

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create session"}

    def test_upstream_failure_details_in_debug(self, client, settings, bootstrap_path, anon_headers, credential, member, identity):
        settings.debug = True
        identity.fail_issue = "Database error finding user"

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": str(member.id),
            "credentialId": "Y3JlZC8x+w==",
        })

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to create session",
            "details": "Database error finding user",
        }

    def test_unexpected_error(self, app, client, bootstrap_path, anon_headers):
        class Broken:
            async def bootstrap(self, user_id, credential_id):
                raise RuntimeError("boom")

        app.dependency_overrides[get_bootstrap_service] = lambda: Broken()

        response = self._post(client, bootstrap_path, anon_headers, {
            "userId": "a",
            "credentialId": "b",
        })

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["access-control-allow-origin"] == "*"
