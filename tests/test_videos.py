import uuid

from conftest import API, publish
from vidshare.models.models import MediaKind


def test_publish_stores_media_and_duration(client, storage, alice):
    alice_id, headers = alice
    video = publish(client, headers)
    assert video["ownerId"] == alice_id
    assert video["isPublished"] is True
    assert video["duration"] == 42.0
    assert video["videoFile"].startswith("http://media.test/video/")
    assert video["thumbnail"].startswith("http://media.test/image/")


def test_publish_requires_title_and_files(client, alice):
    _, headers = alice
    no_title = client.post(
        f"{API}/videos", data={"description": "d"},
        files={"videoFile": ("a.mp4", b"v", "video/mp4"), "thumbnail": ("t.jpg", b"t", "image/jpeg")},
        headers=headers,
    )
    assert no_title.status_code == 400
    assert no_title.json()["message"] == "Title and description are required"

    no_files = client.post(f"{API}/videos", data={"title": "t", "description": "d"}, headers=headers)
    assert no_files.status_code == 400
    assert no_files.json()["message"] == "Video and thumbnail are required"


def test_failed_thumbnail_upload_discards_video(client, storage, alice):
    _, headers = alice
    storage.fail_kind = MediaKind.IMAGE
    response = client.post(
        f"{API}/videos",
        data={"title": "t", "description": "d"},
        files={"videoFile": ("a.mp4", b"v", "video/mp4"), "thumbnail": ("t.jpg", b"t", "image/jpeg")},
        headers=headers,
    )
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to upload video or thumbnail"

    uploaded_video = [u for u in storage.uploads if u.kind == MediaKind.VIDEO]
    assert [(u.public_id, u.kind) for u in uploaded_video] == storage.deleted
    assert all(not path.exists() for path in storage.staged)

    listing = client.get(f"{API}/videos").json()["data"]
    assert listing["totalVideos"] == 0


def test_public_listing_paginates_and_filters(client, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    for n in range(3):
        publish(client, alice_headers, title=f"Cooking {n}", description="kitchen")
    publish(client, bob_headers, title="Gardening", description="plants")

    first = client.get(f"{API}/videos", params={"page": 1, "limit": 2}).json()["data"]
    assert first["totalVideos"] == 4
    assert first["totalPages"] == 2
    assert len(first["videos"]) == 2
    assert first["videos"][0]["owner"]["username"] in {"alice", "bob"}

    last = client.get(f"{API}/videos", params={"page": 2, "limit": 2}).json()["data"]
    assert len(last["videos"]) == 2

    beyond = client.get(f"{API}/videos", params={"page": 9, "limit": 2})
    assert beyond.status_code == 200
    assert beyond.json()["data"]["videos"] == []

    search = client.get(f"{API}/videos", params={"query": "garden"}).json()["data"]
    assert [v["title"] for v in search["videos"]] == ["Gardening"]

    by_owner = client.get(f"{API}/videos", params={"userId": bob_id}).json()["data"]
    assert by_owner["totalVideos"] == 1

    by_title = client.get(f"{API}/videos", params={"sortBy": "title", "sortType": "asc"}).json()["data"]
    assert [v["title"] for v in by_title["videos"]] == ["Cooking 0", "Cooking 1", "Cooking 2", "Gardening"]


def test_listing_rejects_bad_pagination_and_sort(client):
    assert client.get(f"{API}/videos", params={"page": 0}).json()["message"] == "Invalid page number."
    assert client.get(f"{API}/videos", params={"limit": 101}).status_code == 400
    assert client.get(f"{API}/videos", params={"sortBy": "secret"}).status_code == 400
    huge = client.get(f"{API}/videos", params={"page": "100000000000000000000"})
    assert huge.status_code == 400
    assert huge.json()["message"] == "Invalid page number."


def test_get_video_counts_views_and_hides_drafts(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)

    seen = client.get(f"{API}/videos/{video['id']}", headers=bob_headers).json()["data"]
    assert seen["views"] == 1
    assert seen["owner"]["username"] == "alice"

    client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=alice_headers)
    assert client.get(f"{API}/videos/{video['id']}", headers=bob_headers).status_code == 404
    assert client.get(f"{API}/videos/{video['id']}", headers=alice_headers).status_code == 200
    assert client.get(f"{API}/videos").json()["data"]["totalVideos"] == 0


def test_get_video_rejects_malformed_id(client, alice):
    _, headers = alice
    response = client.get(f"{API}/videos/not-an-id", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid video ID format"
    assert client.get(f"{API}/videos/{uuid.uuid4()}", headers=headers).status_code == 404


def test_update_replaces_thumbnail_then_deletes_old_one(client, storage, alice):
    _, headers = alice
    video = publish(client, headers)
    old_thumbnail = next(u for u in storage.uploads if u.url == video["thumbnail"])

    response = client.patch(
        f"{API}/videos/{video['id']}",
        data={"title": "Renamed"},
        files={"thumbnail": ("new.jpg", b"new-thumb", "image/jpeg")},
        headers=headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["title"] == "Renamed"
    assert updated["thumbnail"] == storage.uploads[-1].url
    assert updated["thumbnail"] != video["thumbnail"]
    assert storage.deleted == [(old_thumbnail.public_id, MediaKind.IMAGE)]


def test_update_requires_a_field(client, alice):
    _, headers = alice
    video = publish(client, headers)
    response = client.patch(f"{API}/videos/{video['id']}", data={}, headers=headers)
    assert response.status_code == 400


def test_only_owner_may_modify_video(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)

    toggle = client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=bob_headers)
    assert toggle.status_code == 403
    assert client.patch(f"{API}/videos/{video['id']}", data={"title": "x"}, headers=bob_headers).status_code == 403
    assert client.delete(f"{API}/videos/{video['id']}", headers=bob_headers).status_code == 403


def test_toggle_publish_flips_flag(client, alice):
    _, headers = alice
    video = publish(client, headers)
    response = client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=headers)
    assert response.json() == {
        "statusCode": 200,
        "data": {"isPublished": False},
        "message": "Publish status toggled successfully",
        "success": True,
    }
    again = client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=headers)
    assert again.json()["data"]["isPublished"] is True


def test_delete_removes_video_and_media(client, storage, alice):
    _, headers = alice
    video = publish(client, headers)
    response = client.delete(f"{API}/videos/{video['id']}", headers=headers)
    assert response.status_code == 200
    assert {kind for _, kind in storage.deleted} == {MediaKind.VIDEO, MediaKind.IMAGE}
    assert client.get(f"{API}/videos/{video['id']}", headers=headers).status_code == 404


def test_update_ignores_blank_title(client, alice):
    _, headers = alice
    video = publish(client, headers, title="Keep me")
    blank = client.patch(f"{API}/videos/{video['id']}", data={"title": "   "}, headers=headers)
    assert blank.status_code == 400

    renamed = client.patch(f"{API}/videos/{video['id']}", data={"title": "  ", "description": " new "}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.json()["data"]["title"] == "Keep me"
    assert renamed.json()["data"]["description"] == "new"
