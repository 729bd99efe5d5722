"""
Integration tests for the profile endpoints.
"""
from app.db.models.discussion import Discussion, DiscussionMessage
from app.db.models.job_application import JobApplication
from app.db.models.user import User
from tests.utils import auth_headers, make_user


def test_get_profile(client, headers, test_user):
    response = client.get("/api/user/profile", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile fetched successfully"
    assert body["data"]["id"] == test_user.id
    assert body["data"]["email"] == "test@example.com"
    assert "googleId" not in body["data"]


def test_update_profile_name(client, headers):
    response = client.put("/api/user/profile", json={"name": "  Grace Hopper "}, headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Grace Hopper"
    assert client.get("/api/user/profile", headers=headers).json()["data"]["name"] == "Grace Hopper"


def test_update_profile_accepts_post(client, headers):
    response = client.post("/api/user/profile", json={"name": "Grace Hopper"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Profile updated successfully"
    assert response.json()["data"]["name"] == "Grace Hopper"


def test_update_profile_rejects_blank_name(client, headers):
    response = client.put("/api/user/profile", json={"name": "   "}, headers=headers)

    assert response.status_code == 400


def test_delete_requires_confirmation(client, headers, db_session):
    response = client.request("DELETE", "/api/user/profile", json={}, headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Account deletion must be confirmed"
    assert db_session.query(User).count() == 1


def test_delete_account_removes_owned_data(client, headers, test_user, test_job, db_session):
    """Deleting an account removes its jobs, sessions and discussions and fixes counters elsewhere."""
    other = make_user(db_session, google_id="google-2", email="other@example.com", name="Other")
    other_headers = auth_headers(other)
    client.post("/api/sessions/create", json={"jobId": test_job.id}, headers=headers)

    own = client.post("/api/discussions", json={"topic": "Mine"}, headers=headers).json()["data"]["discussionId"]
    client.post(f"/api/discussions/{own}/messages", json={"content": "hello"}, headers=other_headers)
    theirs = client.post("/api/discussions", json={"topic": "Theirs"}, headers=other_headers).json()["data"]["discussionId"]
    client.post(f"/api/discussions/{theirs}/messages", json={"content": "from me"}, headers=headers)
    client.post(f"/api/discussions/{theirs}/messages", json={"content": "from them"}, headers=other_headers)

    response = client.request("DELETE", "/api/user/profile", json={"confirmDelete": True}, headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Account deleted successfully"
    assert db_session.query(User).count() == 1
    assert db_session.query(JobApplication).count() == 0
    assert db_session.get(Discussion, own) is None
    remaining = db_session.get(Discussion, theirs)
    assert remaining.message_count == 1
    assert remaining.participant_count == 1
    assert db_session.query(DiscussionMessage).count() == 1
    assert client.get("/api/user/profile", headers=headers).status_code == 401
