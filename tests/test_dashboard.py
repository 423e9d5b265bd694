import uuid

from conftest import API, publish


def test_empty_channel_reports_zeroes(client, alice):
    _, headers = alice
    stats = client.get(f"{API}/dashboard/channel-stats", headers=headers)
    assert stats.status_code == 200
    assert stats.json()["data"] == {"totalVideos": 0, "totalSubscribers": 0, "totalViews": 0, "totalLikes": 0}

    tweets = client.get(f"{API}/dashboard/tweets-stats", headers=headers).json()["data"]
    assert tweets == {"totalTweets": 0, "totalTweetLikes": 0, "totalRetweets": 0}

    videos = client.get(f"{API}/dashboard/videos", headers=headers).json()
    assert videos["data"]["videos"] == []
    assert videos["message"] == "No videos found for this channel"


def test_channel_stats_aggregate_activity(client, alice, bob):
    alice_id, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)
    publish(client, alice_headers, title="second")
    client.get(f"{API}/videos/{video['id']}", headers=bob_headers)
    client.post(f"{API}/likes/toggle/v/{video['id']}", headers=bob_headers)
    client.post(f"{API}/subscriptions/c/{alice_id}", headers=bob_headers)

    stats = client.get(f"{API}/dashboard/channel-stats", headers=alice_headers).json()["data"]
    assert stats == {"totalVideos": 2, "totalSubscribers": 1, "totalViews": 1, "totalLikes": 1}

    seen_by_bob = client.get(
        f"{API}/dashboard/channel-stats", params={"channelId": alice_id}, headers=bob_headers,
    ).json()["data"]
    assert seen_by_bob == stats


def test_tweet_stats_count_retweets_and_likes(client, alice, bob):
    alice_id, alice_headers = alice
    _, bob_headers = bob
    tweet = client.post(f"{API}/tweets", json={"content": "original"}, headers=alice_headers).json()["data"]
    client.post(f"{API}/tweets", json={"content": "shared", "isRetweet": True}, headers=alice_headers)
    client.post(f"{API}/likes/toggle/t/{tweet['id']}", headers=bob_headers)

    stats = client.get(f"{API}/dashboard/tweets-stats", headers=alice_headers).json()["data"]
    assert stats == {"totalTweets": 2, "totalTweetLikes": 1, "totalRetweets": 1}

    oldest_first = client.get(
        f"{API}/dashboard/tweets", params={"channelId": alice_id, "sortType": "asc"}, headers=bob_headers,
    ).json()["data"]
    assert [t["content"] for t in oldest_first["tweets"]] == ["original", "shared"]


def test_channel_videos_hide_drafts_from_others(client, alice, bob):
    alice_id, alice_headers = alice
    _, bob_headers = bob
    video = publish(client, alice_headers)
    client.patch(f"{API}/videos/toggle/publish/{video['id']}", headers=alice_headers)

    own = client.get(f"{API}/dashboard/videos", headers=alice_headers).json()["data"]
    assert own["totalVideos"] == 1
    other = client.get(f"{API}/dashboard/videos", params={"channelId": alice_id}, headers=bob_headers).json()["data"]
    assert other["totalVideos"] == 0


def test_unknown_channel(client, alice):
    _, headers = alice
    response = client.get(f"{API}/dashboard/channel-stats", params={"channelId": str(uuid.uuid4())}, headers=headers)
    assert response.status_code == 404
    bad = client.get(f"{API}/dashboard/tweets", params={"channelId": "nope"}, headers=headers)
    assert bad.status_code == 400
