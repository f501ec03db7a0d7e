from __future__ import annotations


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_unknown_route_uses_failure_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json()["success"] is False
    assert res.json()["error"]["kind"] == "NOT_FOUND"


def test_identity_is_provisioned_once(client, db_session):
    from welth import models

    client.get("/api/accounts", headers={"X-User-Id": "new_user", "X-User-Email": "new@example.com"})
    client.get("/api/accounts", headers={"X-User-Id": "new_user"})

    rows = db_session.query(models.User).filter(models.User.clerk_user_id == "new_user").all()
    assert len(rows) == 1
    assert rows[0].email == "new@example.com"


def test_shared_email_does_not_block_provisioning(client, db_session):
    from welth import models

    first = client.get("/api/accounts", headers={"X-User-Id": "first", "X-User-Email": "shared@example.com"})
    second = client.get("/api/accounts", headers={"X-User-Id": "second", "X-User-Email": "shared@example.com"})
    assert first.status_code == 200
    assert second.status_code == 200

    emails = dict(
        db_session.query(models.User.clerk_user_id, models.User.email)
        .filter(models.User.clerk_user_id.in_(["first", "second"]))
        .all()
    )
    assert emails == {"first": "shared@example.com", "second": None}
