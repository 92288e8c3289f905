"""End-to-end tests for the accounts HTTP API."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from accounts import create_app
from accounts.application import create_application
from accounts.config import Settings
from accounts.store import InMemoryUserStore


class AccountsAPITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        settings = Settings(database_path=Path(self._tempdir.name) / "accounts.sqlite3")
        self.client = TestClient(create_application(settings=settings))

    def tearDown(self) -> None:
        self.client.close()
        self._tempdir.cleanup()

    def _register(self, username: str = "alice", email: str = "a@x.com", password: str = "pw") -> dict:
        response = self.client.post(
            "/users",
            json={"username": username, "email": email, "password": password},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_account_lifecycle(self) -> None:
        created = self._register()
        self.assertEqual(created["status"], "ONLINE")
        self.assertTrue(created["token"])
        self.assertIn("registrationDate", created)
        self.assertNotIn("password", created)
        user_id = created["id"]
        token = created["token"]

        login = self.client.post("/login", json={"username": "alice", "password": "pw"})
        self.assertEqual(login.status_code, 200, login.text)
        self.assertEqual(login.json()["status"], "ONLINE")
        self.assertEqual(login.json()["id"], user_id)
        self.assertEqual(login.json()["token"], token)

        denied = self.client.post("/login", json={"username": "alice", "password": "wrong"})
        self.assertEqual(denied.status_code, 401)
        self.assertEqual(denied.json()["detail"], "password does not match with username")

        update = self.client.put(
            f"/users/{user_id}",
            json={"token": token, "username": "alice2", "birthdate": "01-01-2000"},
        )
        self.assertEqual(update.status_code, 204, update.text)
        self.assertEqual(update.content, b"")

        fetched = self.client.get(f"/users/{user_id}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["username"], "alice2")
        self.assertEqual(fetched.json()["birthdate"], "01-01-2000")
        self.assertNotIn("token", fetched.json())

        offline = self.client.put(f"/users/offline/{user_id}", json={"token": token})
        self.assertEqual(offline.status_code, 200, offline.text)
        self.assertEqual(offline.json()["status"], "OFFLINE")
        self.assertNotIn("token", offline.json())

    def test_list_users_hides_credentials(self) -> None:
        self._register("alice", "a@x.com")
        self._register("bob", "b@x.com")

        response = self.client.get("/users")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual([entry["username"] for entry in payload], ["alice", "bob"])
        for entry in payload:
            self.assertNotIn("token", entry)
            self.assertNotIn("password", entry)
            self.assertNotIn("passwordHash", entry)
            self.assertEqual(set(entry), {"id", "username", "email", "status", "birthdate", "registrationDate", "creationDate"})

    def test_unknown_user_is_404(self) -> None:
        response = self.client.get("/users/99")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "User with this ID does not exist")

    def test_duplicate_registration_is_409(self) -> None:
        self._register("alice", "a@x.com")

        username_taken = self.client.post("/users", json={"username": "alice", "email": "new@x.com", "password": "pw"})
        self.assertEqual(username_taken.status_code, 409)
        self.assertIn("username", username_taken.json()["detail"])

        email_taken = self.client.post("/users", json={"username": "bob", "email": "a@x.com", "password": "pw"})
        self.assertEqual(email_taken.status_code, 409)
        self.assertIn("email", email_taken.json()["detail"])

        both_taken = self.client.post("/users", json={"username": "alice", "email": "a@x.com", "password": "pw"})
        self.assertEqual(both_taken.status_code, 409)
        self.assertIn("username and the email", both_taken.json()["detail"])

    def test_login_with_unknown_username_is_400(self) -> None:
        response = self.client.post("/login", json={"username": "ghost", "password": "pw"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "username not found")

    def test_update_with_wrong_token_is_401_and_leaves_user(self) -> None:
        created = self._register()

        response = self.client.put(
            f"/users/{created['id']}",
            json={"token": "forged", "username": "mallory", "birthdate": "01-01-1970"},
        )
        self.assertEqual(response.status_code, 401)

        fetched = self.client.get(f"/users/{created['id']}").json()
        self.assertEqual(fetched["username"], "alice")
        self.assertIsNone(fetched["birthdate"])

    def test_update_checks_user_and_token_before_payload(self) -> None:
        created = self._register()

        forged = self.client.put(f"/users/{created['id']}", json={"token": "forged"})
        self.assertEqual(forged.status_code, 401, forged.text)

        unknown = self.client.put("/users/99", json={"token": created["token"]})
        self.assertEqual(unknown.status_code, 404, unknown.text)

        no_username = self.client.put(f"/users/{created['id']}", json={"token": created["token"]})
        self.assertEqual(no_username.status_code, 400, no_username.text)
        self.assertEqual(self.client.get(f"/users/{created['id']}").json()["username"], "alice")

    def test_set_offline_requires_token(self) -> None:
        created = self._register()

        missing = self.client.put(f"/users/offline/{created['id']}", json={})
        self.assertEqual(missing.status_code, 401)

        wrong = self.client.put(f"/users/offline/{created['id']}", json={"token": "forged"})
        self.assertEqual(wrong.status_code, 401)

        self.assertEqual(self.client.get(f"/users/{created['id']}").json()["status"], "ONLINE")

    def test_set_offline_unknown_user_is_404(self) -> None:
        response = self.client.put("/users/offline/12", json={"token": "anything"})
        self.assertEqual(response.status_code, 404)

    def test_registration_payload_is_validated(self) -> None:
        response = self.client.post("/users", json={"username": "alice"})
        self.assertEqual(response.status_code, 422)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.json(), {"status": "ok"})


class InMemoryStoreAPITests(unittest.TestCase):
    def test_api_runs_on_injected_store(self) -> None:
        store = InMemoryUserStore()
        with TestClient(create_app(store=store)) as client:
            response = client.post("/users", json={"username": "alice", "email": "a@x.com", "password": "pw"})
            self.assertEqual(response.status_code, 201, response.text)

        self.assertEqual([user.username for user in store.list_users()], ["alice"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
