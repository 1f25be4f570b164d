def test_list_users_empty(client):
    response = client.get("/api/users")
    assert response.status_code == 200
    assert response.json() == []


def test_create_user_normalizes_input(client):
    response = client.post("/api/users", json={"name": "  Alan Turing ", "email": "Alan@Example.COM"})
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Alan Turing"
    assert data["email"] == "alan@example.com"
    assert "password" not in data
    assert "hashed_password" not in data


def test_create_user_requires_name_and_email(client):
    response = client.post("/api/users", json={"name": "No Email"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Name and email are required"}


def test_create_user_rejects_invalid_email(client):
    response = client.post("/api/users", json={"name": "Bad", "email": "not-an-email"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid email format"}


def test_create_user_duplicate_email(client, author):
    response = client.post("/api/users", json={"name": "Other", "email": "ADA@example.com"})
    assert response.status_code == 409
    assert response.json() == {"detail": "Email already exists"}


def test_get_user(client, author):
    response = client.get(f"/api/users/{author['id']}")
    assert response.status_code == 200
    assert response.json() == author


def test_get_user_invalid_id(client):
    response = client.get("/api/users/abc")
    assert response.status_code == 400


def test_update_user(client, author):
    response = client.put(f"/api/users/{author['id']}", json={"name": "Countess Ada", "bio": "Poet of numbers"})
    assert response.status_code == 200
    assert response.json()["name"] == "Countess Ada"
    assert response.json()["email"] == "ada@example.com"


def test_update_user_requires_a_field(client, author):
    response = client.put(f"/api/users/{author['id']}", json={})
    assert response.status_code == 400
    assert response.json() == {"detail": "At least one field must be provided"}


def test_update_user_blank_name(client, author):
    response = client.put(f"/api/users/{author['id']}", json={"name": "   "})
    assert response.status_code == 400
    assert response.json() == {"detail": "Name must be a non-empty string"}


def test_update_user_email_taken(client, author):
    client.post("/api/users", json={"name": "Charles", "email": "charles@example.com"})
    response = client.put(f"/api/users/{author['id']}", json={"email": "charles@example.com"})
    assert response.status_code == 409


def test_update_user_keeps_own_email(client, author):
    response = client.put(f"/api/users/{author['id']}", json={"email": "ada@example.com"})
    assert response.status_code == 200


def test_update_user_not_found(client):
    response = client.put("/api/users/999", json={"name": "Ghost"})
    assert response.status_code == 404


def test_delete_user_cascades(client, author, post):
    client.post("/api/comments", json={"content": "Nice", "post_id": post["id"], "author_id": author["id"]})

    response = client.delete(f"/api/users/{author['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully", "user": author}

    assert client.get(f"/api/users/{author['id']}").status_code == 404
    assert client.get(f"/api/posts/{post['id']}").status_code == 404


def test_delete_user_not_found(client):
    response = client.delete("/api/users/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "User not found"}


def test_user_posts(client, author, post):
    client.post("/api/users", json={"name": "Other", "email": "other@example.com"})
    response = client.get(f"/api/users/{author['id']}/posts")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [post["id"]]


def test_user_posts_unknown_user(client):
    response = client.get("/api/users/999/posts")
    assert response.status_code == 404


def test_profile_requires_session(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}


def test_update_profile(logged_in_client):
    response = logged_in_client.put(
        "/api/users/me",
        json={"bio": "Wrote the first compiler", "avatar": "https://example.com/grace.png"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Grace Hopper"
    assert data["bio"] == "Wrote the first compiler"
    assert data["avatar"] == "https://example.com/grace.png"


def test_create_user_name_empty_after_sanitizing(client):
    response = client.post("/api/users", json={"name": "<>", "email": "x@example.com"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Name must be a non-empty string"}
    assert client.get("/api/users").json() == []


def test_update_user_name_empty_after_sanitizing(client, author):
    response = client.put(f"/api/users/{author['id']}", json={"name": "< >"})
    assert response.status_code == 400
    assert client.get(f"/api/users/{author['id']}").json()["name"] == "Ada Lovelace"
