"""
JSON datastore tests: users, preferences, playlists, audit records,
listening history and corrupted-file recovery.
"""

import json
import threading

from moodify import config, datastore


class TestUsers:

    def test_create_and_find(self, user_factory):
        user = user_factory("abc")
        assert user["id"] == 1
        assert datastore.find_user_by_id(1)["spotify_id"] == "abc"
        assert datastore.find_user_by_id("1")["spotify_id"] == "abc"
        assert datastore.find_user_by_spotify_id("abc")["id"] == 1

    def test_ids_increment(self, user_factory):
        assert user_factory("a")["id"] == 1
        assert user_factory("b")["id"] == 2

    def test_missing_user(self):
        assert datastore.find_user_by_id(42) is None
        assert datastore.find_user_by_id("not-a-number") is None
        assert datastore.find_user_by_spotify_id("ghost") is None

    def test_update_tokens_keeps_refresh_when_absent(self, user_factory):
        user_factory("abc")
        updated = datastore.update_user_tokens("abc", "new-access", None, 999, touch_login=False)
        assert updated["access_token"] == "new-access"
        assert updated["refresh_token"] == "refresh-abc"
        assert updated["token_expires_at"] == 999
        assert datastore.find_user_by_spotify_id("abc")["access_token"] == "new-access"

    def test_update_unknown_user(self):
        assert datastore.update_user_tokens("ghost", "a", "r", 1) is None

    def test_public_user_hides_tokens(self, user_factory):
        out = datastore.public_user(user_factory("abc"))
        assert "access_token" not in out
        assert "refresh_token" not in out
        assert out["spotify_id"] == "abc"


class TestPreferences:

    def test_defaults_on_create(self):
        prefs = datastore.update_preferences(1, {"favorite_genres": ["jazz"]})
        assert prefs["favorite_genres"] == ["jazz"]
        assert prefs["favorite_artists"] == []
        assert prefs["hobby_tags"] == []
        assert prefs["listening_time_preference"] == "any"
        assert prefs["tempo_preference"] == "medium"

    def test_partial_update(self):
        datastore.update_preferences(1, {"favorite_genres": ["jazz"], "tempo_preference": "slow"})
        prefs = datastore.update_preferences(1, {"hobby_tags": ["yoga"], "favorite_genres": None})
        assert prefs["favorite_genres"] == ["jazz"]
        assert prefs["hobby_tags"] == ["yoga"]
        assert prefs["tempo_preference"] == "slow"
        assert datastore.get_preferences(1)["hobby_tags"] == ["yoga"]

    def test_one_record_per_user(self):
        datastore.update_preferences(1, {})
        datastore.update_preferences(1, {"tempo_preference": "fast"})
        datastore.update_preferences(2, {})
        stored = json.loads((config.DATA_DIR / "preferences.json").read_text(encoding="utf-8"))
        assert sorted(x["user_id"] for x in stored) == [1, 2]

    def test_none_for_unknown_user(self):
        assert datastore.get_preferences(7) is None


class TestPlaylists:

    def test_newest_first_per_user(self):
        for n in range(3):
            datastore.create_playlist_record({"user_id": 1, "name": f"p{n}", "track_count": n})
        datastore.create_playlist_record({"user_id": 2, "name": "other"})

        names = [p["name"] for p in datastore.list_playlists(1)]
        assert names == ["p2", "p1", "p0"]
        assert [p["name"] for p in datastore.list_playlists(1, limit=2)] == ["p2", "p1"]

    def test_find_playlist(self):
        rec = datastore.create_playlist_record({"user_id": 1, "name": "Mix", "track_count": "12"})
        found = datastore.find_playlist(str(rec["id"]))
        assert found["name"] == "Mix"
        assert found["track_count"] == 12
        assert found["description"] == ""
        assert datastore.find_playlist(99) is None


class TestRecommendations:

    def test_audit_record(self):
        rid = datastore.save_recommendation(1, 5, {"mood": "sad"}, {"genres": ["indie"]}, {"query": "genre:indie"})
        assert rid == 1
        recs = datastore.list_recommendations(1)
        assert recs[0]["playlist_id"] == 5
        assert recs[0]["input_data"] == {"mood": "sad"}
        assert recs[0]["spotify_params"]["query"] == "genre:indie"
        assert datastore.list_recommendations(2) == []


class TestListeningHistory:

    def test_recent_first_and_limited(self):
        for n in range(4):
            datastore.add_listening_history(1, {"track_id": f"t{n}", "mood_context": "chill"})
        datastore.add_listening_history(2, {"track_id": "x"})

        recent = datastore.recent_listening_history(1, limit=3)
        assert [r["track_id"] for r in recent] == ["t3", "t2", "t1"]
        assert recent[0]["mood_context"] == "chill"


class TestKeyedAndRecovery:

    def test_keyed_roundtrip(self):
        datastore.put_keyed(datastore.SESSIONS, "s1", {"user_id": 1})
        assert datastore.get_keyed(datastore.SESSIONS, "s1") == {"user_id": 1}
        assert datastore.pop_keyed(datastore.SESSIONS, "s1") == {"user_id": 1}
        assert datastore.pop_keyed(datastore.SESSIONS, "s1") is None

    def test_corrupted_file_is_backed_up(self):
        config.DATA_DIR.mkdir(parents=True, exist_ok=True)
        path = config.DATA_DIR / "users.json"
        path.write_text("{not json", encoding="utf-8")

        assert datastore.find_user_by_spotify_id("abc") is None
        assert not path.exists()
        assert (config.DATA_DIR / "users.bak").read_text(encoding="utf-8") == "{not json"

    def test_wrong_shape_reads_as_empty(self):
        config.DATA_DIR.mkdir(parents=True, exist_ok=True)
        (config.DATA_DIR / "sessions.json").write_text("[1, 2]", encoding="utf-8")
        assert datastore.get_keyed(datastore.SESSIONS, "anything") is None


class TestConcurrentAccess:

    def test_readers_never_see_a_partial_write(self):
        for n in range(50):
            datastore.put_keyed(datastore.SESSIONS, f"sid-{n}", {"user_id": n})

        done = threading.Event()

        def writer():
            try:
                for n in range(50, 250):
                    datastore.put_keyed(datastore.SESSIONS, f"sid-{n}", {"user_id": n})
            finally:
                done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        misses = 0
        while not done.is_set():
            if datastore.get_keyed(datastore.SESSIONS, "sid-5") is None:
                misses += 1
        thread.join()

        assert misses == 0
        assert not (config.DATA_DIR / "sessions.bak").exists()
        stored = json.loads((config.DATA_DIR / "sessions.json").read_text(encoding="utf-8"))
        assert len(stored) == 250

    def test_write_leaves_no_temp_file(self):
        datastore.put_keyed(datastore.SESSIONS, "s1", {"user_id": 1})
        assert sorted(p.name for p in config.DATA_DIR.iterdir()) == ["sessions.json"]
