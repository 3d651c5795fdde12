"""Tests for the post service endpoints.

Covers creation, validation, ownership rules, soft deletion, likes and the
paginated listings (author, feed, search, trending).

Each test follows the Given-When-Then pattern.
"""
import pytest

pytestmark = pytest.mark.usefixtures("mock_user_client")


def create_post(client, headers, content="Hello world", **extra):
    return client.post("/api/posts", json={"content": content, **extra}, headers=headers)


def test_create_post(post_client, alice_headers):
    """Creating a post returns the content with counters at zero.

    Given: alice is an active user
    When: she publishes a post
    Then: 201 with her author info and zeroed counters
    """
    # When: publish
    response = create_post(post_client, alice_headers, "Hello #Python and #python @bob")

    # Then: created
    assert response.status_code == 201
    data = response.json()
    assert data["content"] == "Hello #Python and #python @bob"
    assert data["status"] == "PUBLISHED"
    assert data["author_id"] == "1"
    assert data["author"]["username"] == "alice"
    assert data["author"]["display_name"] == "Alice"
    for counter in ("like_count", "comment_count", "share_count", "view_count"):
        assert data[counter] == 0
    assert data["is_edited"] is False
    assert data["is_liked"] is False
    assert data["hashtags"] == ["#python"]
    assert data["mentions"] == ["bob"]


def test_create_post_forwards_authorization(post_client, alice_headers, mock_user_client):
    """The caller's Authorization header is passed on to the user service."""
    create_post(post_client, alice_headers)

    _, kwargs = mock_user_client.get_user_by_id.call_args
    assert kwargs["authorization"] == alice_headers["Authorization"]


def test_create_post_requires_token(post_client):
    response = post_client.post("/api/posts", json={"content": "hi"})
    assert response.status_code == 401


def test_create_post_inactive_author(post_client, carol_headers):
    """Given: carol is suspended / When: she posts / Then: 400."""
    response = create_post(post_client, carol_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "User not found or inactive"


def test_create_post_unknown_author(post_client):
    from socialapi.server.security import create_token

    headers = {"Authorization": f"Bearer {create_token(user_id=99, username='ghost')}"}

    response = create_post(post_client, headers)

    assert response.status_code == 400


def test_create_post_content_too_long(post_client, alice_headers):
    response = create_post(post_client, alice_headers, "x" * 2001)
    assert response.status_code == 422


def test_create_post_blank_content(post_client, alice_headers):
    response = create_post(post_client, alice_headers, "   ")

    assert response.status_code == 400
    assert response.json()["detail"] == "Post content cannot be empty"


def test_create_post_is_sanitized(post_client, alice_headers):
    """HTML is escaped and script schemes are stripped."""
    response = create_post(post_client, alice_headers, '<b>bold</b> javascript:alert("x")')

    assert response.status_code == 201
    assert response.json()["content"] == "&lt;b&gt;bold&lt;/b&gt; alert(&quot;x&quot;)"


@pytest.mark.parametrize(
    "media",
    [
        {"image_urls": ["ftp://cdn.example.com/a.png"]},
        {"image_urls": ["https://cdn.example.com/a.exe"]},
        {"image_urls": [f"https://cdn.example.com/{i}.png" for i in range(11)]},
        {"video_url": "https://cdn.example.com/clip.avi"},
        {"video_url": "javascript:alert(1)"},
    ],
)
def test_create_post_rejects_bad_media(post_client, alice_headers, media):
    response = create_post(post_client, alice_headers, **media)
    assert response.status_code == 400


def test_create_post_with_media(post_client, alice_headers):
    response = create_post(
        post_client,
        alice_headers,
        image_urls=["https://cdn.example.com/a.png", "https://cdn.example.com/b.JPG"],
        video_url="https://cdn.example.com/clip.mp4",
    )

    assert response.status_code == 201
    assert len(response.json()["image_urls"]) == 2
    assert response.json()["video_url"] == "https://cdn.example.com/clip.mp4"


def test_get_post_counts_views(post_client, alice_headers, bob_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]

    first = post_client.get(f"/api/posts/{post_id}", headers=bob_headers)
    second = post_client.get(f"/api/posts/{post_id}", headers=bob_headers)

    assert first.status_code == 200
    assert first.json()["view_count"] == 1
    assert second.json()["view_count"] == 2


def test_get_missing_post(post_client, alice_headers):
    response = post_client.get("/api/posts/12345", headers=alice_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"


def test_update_post_by_owner(post_client, alice_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]

    response = post_client.put(
        f"/api/posts/{post_id}", json={"content": "Edited text"}, headers=alice_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["content"] == "Edited text"
    assert data["is_edited"] is True
    assert data["edited_at"] is not None


def test_update_post_by_non_owner(post_client, alice_headers, bob_headers):
    """Given: alice's post / When: bob edits it / Then: 403 and content unchanged."""
    post_id = create_post(post_client, alice_headers).json()["id"]

    response = post_client.put(
        f"/api/posts/{post_id}", json={"content": "Hijacked"}, headers=bob_headers
    )

    assert response.status_code == 403
    assert post_client.get(f"/api/posts/{post_id}", headers=alice_headers).json()["content"] == "Hello world"


def test_update_missing_post(post_client, alice_headers):
    response = post_client.put("/api/posts/999", json={"content": "x"}, headers=alice_headers)
    assert response.status_code == 404


def test_delete_post_by_non_owner(post_client, alice_headers, bob_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]

    response = post_client.delete(f"/api/posts/{post_id}", headers=bob_headers)

    assert response.status_code == 403


def test_delete_post_is_soft(post_client, alice_headers, databases):
    """Given: alice's post
    When: she deletes it
    Then: it disappears from the API but the row remains as REMOVED
    """
    from socialapi.models.post import Post, PostStatus

    post_id = create_post(post_client, alice_headers).json()["id"]

    # When: delete
    response = post_client.delete(f"/api/posts/{post_id}", headers=alice_headers)

    # Then: gone from the API
    assert response.status_code == 200
    assert post_client.get(f"/api/posts/{post_id}", headers=alice_headers).status_code == 404
    assert post_client.delete(f"/api/posts/{post_id}", headers=alice_headers).status_code == 404

    # Then: row kept with REMOVED status
    session = databases["post"].new_session()
    try:
        assert session.get(Post, post_id).status == PostStatus.REMOVED
    finally:
        session.close()


def test_like_and_unlike_post(post_client, alice_headers, bob_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]

    # When: bob likes the post
    liked = post_client.post(f"/api/posts/{post_id}/like", headers=bob_headers)
    assert liked.status_code == 201
    assert liked.json() == {"target_id": post_id, "liked": True, "like_count": 1}

    # Then: is_liked is per caller
    assert post_client.get(f"/api/posts/{post_id}", headers=bob_headers).json()["is_liked"] is True
    assert post_client.get(f"/api/posts/{post_id}", headers=alice_headers).json()["is_liked"] is False

    # When: bob unlikes it
    unliked = post_client.delete(f"/api/posts/{post_id}/like", headers=bob_headers)
    assert unliked.status_code == 200
    assert unliked.json()["like_count"] == 0

    # Then: unliking again is a 404
    assert post_client.delete(f"/api/posts/{post_id}/like", headers=bob_headers).status_code == 404


def test_duplicate_like_is_rejected(post_client, alice_headers, bob_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]
    post_client.post(f"/api/posts/{post_id}/like", headers=bob_headers)

    response = post_client.post(f"/api/posts/{post_id}/like", headers=bob_headers)

    assert response.status_code == 409
    assert post_client.get(f"/api/posts/{post_id}", headers=bob_headers).json()["like_count"] == 1


def test_like_missing_post(post_client, bob_headers):
    assert post_client.post("/api/posts/404/like", headers=bob_headers).status_code == 404


def test_post_likes_listing(post_client, alice_headers, bob_headers):
    post_id = create_post(post_client, alice_headers).json()["id"]
    post_client.post(f"/api/posts/{post_id}/like", headers=alice_headers)
    post_client.post(f"/api/posts/{post_id}/like", headers=bob_headers)

    response = post_client.get(f"/api/posts/{post_id}/likes", headers=alice_headers)

    assert response.status_code == 200
    assert response.json()["total_elements"] == 2
    assert {like["user_id"] for like in response.json()["content"]} == {"1", "2"}


def test_list_posts_paginated(post_client, alice_headers, bob_headers):
    for i in range(3):
        create_post(post_client, alice_headers, f"post {i}")
    deleted = create_post(post_client, alice_headers, "gone").json()["id"]
    post_client.delete(f"/api/posts/{deleted}", headers=alice_headers)

    response = post_client.get("/api/posts?page=0&size=2", headers=bob_headers)

    assert response.status_code == 200
    page = response.json()
    assert [post["content"] for post in page["content"]] == ["post 2", "post 1"]
    assert page["total_elements"] == 3
    assert page["total_pages"] == 2
    assert page["first"] is True
    assert page["last"] is False
    assert page["content"][0]["author"]["username"] == "alice"


@pytest.mark.parametrize("query", ["size=0", "size=101", "page=-1"])
def test_list_posts_rejects_bad_paging(post_client, alice_headers, query):
    assert post_client.get(f"/api/posts?{query}", headers=alice_headers).status_code == 422


def test_posts_by_author(post_client, alice_headers, bob_headers):
    create_post(post_client, alice_headers, "by alice")
    create_post(post_client, bob_headers, "by bob")

    response = post_client.get("/api/posts/author/2", headers=alice_headers)

    assert [post["content"] for post in response.json()["content"]] == ["by bob"]


def test_feed_posts(post_client, alice_headers, bob_headers):
    """Feed shows only posts by followed authors; an empty follow list is an empty page."""
    create_post(post_client, alice_headers, "by alice")
    create_post(post_client, bob_headers, "by bob")

    feed = post_client.get("/api/posts/feed?following=2", headers=alice_headers).json()
    both = post_client.get("/api/posts/feed?following=1,2", headers=alice_headers).json()
    empty = post_client.get("/api/posts/feed", headers=alice_headers).json()

    assert [post["content"] for post in feed["content"]] == ["by bob"]
    assert both["total_elements"] == 2
    assert empty["empty"] is True
    assert empty["total_elements"] == 0


def test_search_posts(post_client, alice_headers):
    create_post(post_client, alice_headers, "Learning FastAPI today")
    create_post(post_client, alice_headers, "Something else")

    response = post_client.get("/api/posts/search?q=fastapi", headers=alice_headers)
    blank = post_client.get("/api/posts/search?q=%20", headers=alice_headers)

    assert [post["content"] for post in response.json()["content"]] == ["Learning FastAPI today"]
    assert blank.status_code == 400


def test_trending_posts_ordered_by_likes(post_client, alice_headers, bob_headers):
    quiet = create_post(post_client, alice_headers, "quiet").json()["id"]
    popular = create_post(post_client, alice_headers, "popular").json()["id"]
    newest = create_post(post_client, alice_headers, "newest").json()["id"]
    post_client.post(f"/api/posts/{popular}/like", headers=alice_headers)
    post_client.post(f"/api/posts/{popular}/like", headers=bob_headers)
    post_client.post(f"/api/posts/{quiet}/like", headers=bob_headers)

    response = post_client.get("/api/posts/trending", headers=alice_headers)

    assert [post["id"] for post in response.json()["content"]] == [popular, quiet, newest]
