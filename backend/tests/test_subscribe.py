def test_subscribe_once(client):
    res = client.post("/api/subscribe", json={"email": " News@Example.com "})
    assert res.status_code == 201
    assert res.json()["success"] is True

    res = client.post("/api/subscribe", json={"email": "news@example.com"})
    assert res.status_code == 400
    assert res.json()["message"] == "Subscriber already exists"


def test_subscribe_requires_email(client):
    res = client.post("/api/subscribe", json={})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Email is required"}
