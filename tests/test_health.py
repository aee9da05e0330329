def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    assert client.get("/").status_code == 200


def test_validation_errors_are_bad_requests(client):
    response = client.post("/auth/login", content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert "detail" in response.json()
