import io
import os

import pytest

from feed.models.post import Post
from feed.models.user import User
from tests.factories.post import PostFactory
from tests.factories.user import UserFactory

POSTS_URL = "/api/v1/posts"


@pytest.fixture()
def alice(db):
    return UserFactory(name="Alice")


@pytest.fixture()
def headers(alice, auth_headers):
    return auth_headers(alice)


def _post_body(**overrides):
    body = {"title": "A fine title", "content": "Some fine content", "image_url": "images/a.png"}
    body.update(overrides)
    return body


class TestListPosts:
    def test_anonymous_listing_is_allowed(self, client, alice):
        PostFactory(creator=alice)

        response = client.get(POSTS_URL)

        assert response.status_code == 200
        body = response.get_json()
        assert body["total_count"] == 1
        assert body["data"][0]["creator"] == {"id": alice.id, "name": "Alice"}

    def test_second_page_of_fifteen(self, client, alice):
        for _ in range(15):
            PostFactory(creator=alice)

        body = client.get(f"{POSTS_URL}?page=2").get_json()

        assert len(body["data"]) == 5
        assert body["total_count"] == 15
        assert body["meta"] == {"page": 2, "limit": 10, "total": 15, "has_prev": True, "has_next": False}

    def test_non_numeric_page_is_rejected(self, client):
        response = client.get(f"{POSTS_URL}?page=abc")

        assert response.status_code == 422


class TestCreatePost:
    def test_create_with_json(self, client, alice, headers, channel, session):
        response = client.post(POSTS_URL, json=_post_body(), headers=headers)

        assert response.status_code == 201
        data = response.get_json()["data"]
        assert data["title"] == "A fine title"
        assert data["creator"]["id"] == alice.id
        assert response.headers.get("ETag")
        assert channel.events[-1]["action"] == "create"
        session.expire_all()
        assert data["id"] in session.get(User, alice.id).post_ids

    def test_create_with_multipart_upload(self, client, headers, image_store):
        response = client.post(
            POSTS_URL,
            data={
                "title": "Picture post",
                "content": "Look at this",
                "image": (io.BytesIO(b"\x89PNG"), "photo.png", "image/png"),
            },
            headers=headers,
            content_type="multipart/form-data",
        )

        assert response.status_code == 201
        image_url = response.get_json()["data"]["image_url"]
        assert image_url.startswith("images/") and image_url.endswith(".png")
        assert image_store.path_for(image_url) is not None

    def test_create_rejects_unsupported_upload(self, client, headers):
        response = client.post(
            POSTS_URL,
            data={
                "title": "Picture post",
                "content": "Look at this",
                "image": (io.BytesIO(b"GIF89a"), "anim.gif", "image/gif"),
            },
            headers=headers,
            content_type="multipart/form-data",
        )

        assert response.status_code == 422
        assert response.get_json()["details"]["violations"][0]["field"] == "image"

    def test_anonymous_create_is_unauthorized(self, client, channel):
        response = client.post(POSTS_URL, json=_post_body())

        assert response.status_code == 401
        assert channel.events == []

    def test_invalid_token_is_treated_as_anonymous(self, client):
        response = client.post(POSTS_URL, json=_post_body(), headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_short_fields_are_all_reported(self, client, headers, session):
        response = client.post(POSTS_URL, json=_post_body(title="abc", content="de"), headers=headers)

        assert response.status_code == 422
        violations = response.get_json()["details"]["violations"]
        assert [v["field"] for v in violations] == ["title", "content"]
        assert session.query(Post).count() == 0


class TestGetPost:
    def test_get_requires_authentication(self, client, alice):
        post = PostFactory(creator=alice)

        assert client.get(f"{POSTS_URL}/{post.id}").status_code == 401

    def test_get_returns_post_with_etag(self, client, alice, headers):
        post = PostFactory(creator=alice, title="Readable title")

        response = client.get(f"{POSTS_URL}/{post.id}", headers=headers)

        assert response.status_code == 200
        assert response.get_json()["data"]["title"] == "Readable title"
        etag = response.headers["ETag"].strip('"')
        cached = client.get(f"{POSTS_URL}/{post.id}", headers={**headers, "If-None-Match": f'"{etag}"'})
        assert cached.status_code == 304

    def test_missing_post_is_not_found(self, client, headers):
        response = client.get(f"{POSTS_URL}/999", headers=headers)

        assert response.status_code == 404
        assert response.get_json()["code"] == "not_found"


class TestUpdatePost:
    def test_update_roundtrip(self, client, alice, headers):
        post = PostFactory(creator=alice, image_url="images/keep.png")

        response = client.put(
            f"{POSTS_URL}/{post.id}",
            json={"title": "Updated title", "content": "Updated content"},
            headers=headers,
        )
        fetched = client.get(f"{POSTS_URL}/{post.id}", headers=headers).get_json()["data"]

        assert response.status_code == 200
        assert fetched["title"] == "Updated title"
        assert fetched["content"] == "Updated content"
        assert fetched["image_url"] == "images/keep.png"

    def test_update_by_other_user_is_forbidden(self, client, alice, auth_headers, session):
        post = PostFactory(creator=alice, title="Original title")
        mallory = UserFactory()

        response = client.put(
            f"{POSTS_URL}/{post.id}",
            json=_post_body(title="Hijacked title"),
            headers=auth_headers(mallory),
        )

        assert response.status_code == 403
        assert response.get_json()["detail"] == "Not authorized!"
        session.expire_all()
        assert session.get(Post, post.id).title == "Original title"


class TestDeletePost:
    def test_delete_removes_post_and_image(self, client, alice, headers, image_store, channel):
        upload = client.post(
            "/api/v1/images",
            data={"image": (io.BytesIO(b"\x89PNG"), "x.png", "image/png")},
            headers=headers,
            content_type="multipart/form-data",
        )
        image_url = upload.get_json()["data"]["image_url"]
        post_id = client.post(POSTS_URL, json=_post_body(image_url=image_url), headers=headers).get_json()["data"]["id"]

        response = client.delete(f"{POSTS_URL}/{post_id}", headers=headers)

        assert response.status_code == 200
        assert channel.events[-1] == {"action": "delete", "post_id": post_id}
        assert not os.path.exists(image_store.path_for(image_url))
        assert client.get(f"{POSTS_URL}/{post_id}", headers=headers).status_code == 404
        assert client.get(POSTS_URL).get_json()["total_count"] == 0

    def test_delete_by_other_user_is_forbidden(self, client, alice, auth_headers, session):
        post = PostFactory(creator=alice)

        response = client.delete(f"{POSTS_URL}/{post.id}", headers=auth_headers(UserFactory()))

        assert response.status_code == 403
        session.expire_all()
        assert session.get(Post, post.id) is not None

    def test_deleting_a_post_that_borrows_an_image_keeps_the_file(
        self, client, alice, headers, auth_headers, image_store
    ):
        upload = client.post(
            "/api/v1/images",
            data={"image": (io.BytesIO(b"\x89PNG"), "x.png", "image/png")},
            headers=headers,
            content_type="multipart/form-data",
        )
        image_url = upload.get_json()["data"]["image_url"]
        alice_post = client.post(POSTS_URL, json=_post_body(image_url=image_url), headers=headers).get_json()["data"]
        mallory_headers = auth_headers(UserFactory())
        borrowed = client.post(POSTS_URL, json=_post_body(image_url=image_url), headers=mallory_headers)

        response = client.delete(f"{POSTS_URL}/{borrowed.get_json()['data']['id']}", headers=mallory_headers)

        assert response.status_code == 200
        assert os.path.exists(image_store.path_for(image_url))
        fetched = client.get(f"{POSTS_URL}/{alice_post['id']}", headers=headers).get_json()["data"]
        assert fetched["image_url"] == image_url
