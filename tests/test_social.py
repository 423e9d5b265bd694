import uuid

from conftest import API, publish


# ── Comments ─────────────────────────────────────────────────────────────

def test_comment_lifecycle(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)

    created = client.post(f"{API}/comments/{video['id']}", json={"content": "Nice!"}, headers=bob_headers)
    assert created.status_code == 201
    comment = created.json()["data"]

    listing = client.get(f"{API}/comments/{video['id']}", headers=alice_headers).json()["data"]
    assert listing["totalComments"] == 1
    assert listing["comments"][0]["owner"]["username"] == "bob"

    edited = client.patch(f"{API}/comments/c/{comment['id']}", json={"content": "Great!"}, headers=bob_headers)
    assert edited.json()["data"]["content"] == "Great!"

    assert client.delete(f"{API}/comments/c/{comment['id']}", headers=bob_headers).status_code == 200
    empty = client.get(f"{API}/comments/{video['id']}", headers=alice_headers)
    assert empty.status_code == 200
    assert empty.json()["data"]["comments"] == []


def test_comment_requires_content_and_video(client, alice):
    _, headers = alice
    video = publish(client, headers)
    blank = client.post(f"{API}/comments/{video['id']}", json={"content": "  "}, headers=headers)
    assert blank.status_code == 400
    assert blank.json()["message"] == "Missing content! Comment content is required"

    missing = client.post(f"{API}/comments/{uuid.uuid4()}", json={"content": "hi"}, headers=headers)
    assert missing.status_code == 404


def test_only_owner_may_modify_comment(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)
    comment = client.post(f"{API}/comments/{video['id']}", json={"content": "mine"}, headers=alice_headers)
    comment_id = comment.json()["data"]["id"]

    update = client.patch(f"{API}/comments/c/{comment_id}", json={"content": "hijack"}, headers=bob_headers)
    assert update.status_code == 403
    assert update.json()["message"] == "You are not authorized to update this comment"
    assert client.delete(f"{API}/comments/c/{comment_id}", headers=bob_headers).status_code == 403


# ── Tweets ───────────────────────────────────────────────────────────────

def test_tweet_lifecycle(client, alice, bob):
    alice_id, alice_headers = alice
    _, bob_headers = bob

    tweet = client.post(f"{API}/tweets", json={"content": "hello world"}, headers=alice_headers).json()["data"]
    assert tweet["isRetweet"] is False

    listing = client.get(f"{API}/tweets/user/{alice_id}", headers=bob_headers).json()["data"]
    assert listing["totalTweets"] == 1
    assert listing["tweets"][0]["owner"]["username"] == "alice"

    forbidden = client.patch(f"{API}/tweets/{tweet['id']}", json={"content": "x"}, headers=bob_headers)
    assert forbidden.status_code == 403
    assert client.delete(f"{API}/tweets/{tweet['id']}", headers=bob_headers).status_code == 403

    edited = client.patch(f"{API}/tweets/{tweet['id']}", json={"content": "edited"}, headers=alice_headers)
    assert edited.json()["data"]["content"] == "edited"
    assert client.delete(f"{API}/tweets/{tweet['id']}", headers=alice_headers).status_code == 200


def test_tweet_validation(client, alice):
    _, headers = alice
    response = client.post(f"{API}/tweets", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Missing content! Tweet content is required"
    assert client.get(f"{API}/tweets/user/{uuid.uuid4()}", headers=headers).status_code == 404


# ── Likes ────────────────────────────────────────────────────────────────

def test_video_like_toggle_is_involutive(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, bob_headers)

    liked = client.post(f"{API}/likes/toggle/v/{video['id']}", headers=alice_headers)
    assert liked.json()["data"] == {"liked": True}
    assert liked.json()["message"] == "Video liked successfully"

    favourites = client.get(f"{API}/likes/videos", headers=alice_headers).json()["data"]
    assert [item["video"]["id"] for item in favourites] == [video["id"]]
    assert favourites[0]["video"]["owner"]["username"] == "bob"

    unliked = client.post(f"{API}/likes/toggle/v/{video['id']}", headers=alice_headers)
    assert unliked.json()["data"] == {"liked": False}
    assert unliked.json()["message"] == "Video unliked successfully"
    assert client.get(f"{API}/likes/videos", headers=alice_headers).json()["data"] == []


def test_comment_and_tweet_likes(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)
    comment = client.post(f"{API}/comments/{video['id']}", json={"content": "c"}, headers=alice_headers)
    tweet = client.post(f"{API}/tweets", json={"content": "t"}, headers=alice_headers)

    on_comment = client.post(f"{API}/likes/toggle/c/{comment.json()['data']['id']}", headers=bob_headers)
    assert on_comment.json()["message"] == "Comment liked successfully"
    on_tweet = client.post(f"{API}/likes/toggle/t/{tweet.json()['data']['id']}", headers=bob_headers)
    assert on_tweet.json()["message"] == "Tweet liked successfully"


def test_like_on_missing_target(client, alice):
    _, headers = alice
    response = client.post(f"{API}/likes/toggle/t/{uuid.uuid4()}", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Tweet not found"
    assert client.post(f"{API}/likes/toggle/v/bogus", headers=headers).status_code == 400


# ── Subscriptions ────────────────────────────────────────────────────────

def test_subscription_toggle_and_listings(client, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob

    subscribed = client.post(f"{API}/subscriptions/c/{bob_id}", headers=alice_headers)
    assert subscribed.status_code == 201
    assert subscribed.json()["data"]["subscribed"] is True
    assert subscribed.json()["data"]["subscription"]["channelId"] == bob_id

    subscribers = client.get(f"{API}/subscriptions/c/{bob_id}", headers=bob_headers).json()["data"]
    assert [s["username"] for s in subscribers] == ["alice"]
    channels = client.get(f"{API}/subscriptions/u/{alice_id}", headers=alice_headers).json()["data"]
    assert [c["id"] for c in channels] == [bob_id]

    unsubscribed = client.post(f"{API}/subscriptions/c/{bob_id}", headers=alice_headers)
    assert unsubscribed.status_code == 200
    assert unsubscribed.json()["message"] == "Channel unsubscribed successfully"
    assert client.get(f"{API}/subscriptions/c/{bob_id}", headers=bob_headers).json()["data"] == []


def test_subscription_to_unknown_channel(client, alice):
    _, headers = alice
    missing = uuid.uuid4()
    assert client.post(f"{API}/subscriptions/c/{missing}", headers=headers).status_code == 404
    assert client.get(f"{API}/subscriptions/c/{missing}", headers=headers).status_code == 404
    assert client.get(f"{API}/subscriptions/u/{missing}", headers=headers).status_code == 404


def test_unpublished_videos_drop_out_of_likes(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, bob_headers)
    client.post(f"{API}/likes/toggle/v/{video['id']}", headers=alice_headers)

    client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=bob_headers)
    assert client.get(f"{API}/likes/videos", headers=alice_headers).json()["data"] == []
    assert client.post(f"{API}/likes/toggle/v/{video['id']}", headers=alice_headers).status_code == 404

    client.post(f"{API}/likes/toggle/v/{video['id']}", headers=bob_headers)
    own = client.get(f"{API}/likes/videos", headers=bob_headers).json()["data"]
    assert [item["video"]["id"] for item in own] == [video["id"]]
