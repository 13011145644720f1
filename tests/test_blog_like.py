from __future__ import annotations

from core.settings import Settings, get_settings
from main import app

from conftest import SUPABASE_URL


def _seed(supabase) -> None:
    supabase.tables["blog_posts"] = [{"id": 7, "likes": 3, "reads": 0}]
    supabase.tables["blog_likes"] = []
    supabase.unique["blog_likes"] = ("post_id", "user_id")

    def bump_likes(row):
        for post in supabase.tables["blog_posts"]:
            if post["id"] == row["post_id"]:
                post["likes"] += 1

    supabase.triggers["blog_likes"] = bump_likes


def test_first_like_is_recorded_and_counter_read_back(client, supabase):
    _seed(supabase)

    resp = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    assert resp.status_code == 200
    assert resp.json() == {"liked": True, "likes": 4}
    assert supabase.tables["blog_likes"] == [{"post_id": 7, "user_id": "u-1"}]


def test_second_like_is_a_noop(client, supabase):
    _seed(supabase)

    first = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})
    second = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    assert first.json() == {"liked": True, "likes": 4}
    assert second.status_code == 200
    assert second.json() == {"liked": False, "likes": 4}
    assert len(supabase.tables["blog_likes"]) == 1


def test_failed_insert_is_treated_as_already_liked(client, supabase):
    _seed(supabase)
    supabase.fail("POST", "blog_likes", 409, code="23505", message="duplicate key value")

    resp = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    assert resp.status_code == 200
    assert resp.json() == {"liked": False, "likes": 3}


def test_like_uses_service_role_key(client, supabase):
    _seed(supabase)

    client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    inserts = supabase.calls("POST", "/rest/v1/blog_likes")
    assert inserts[0].headers["apikey"] == "service-key"


def test_unknown_post_reports_null_likes(client, supabase):
    supabase.tables["blog_posts"] = []

    resp = client.post("/api/blog/like", json={"post_id": 99, "user_id": "u-1"})

    assert resp.json() == {"liked": True, "likes": None}


def test_missing_user_id_is_rejected(client):
    resp = client.post("/api/blog/like", json={"post_id": 7})

    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "error": "Missing post_id or user_id"}


def test_like_check_failure_is_a_server_error(client, supabase):
    _seed(supabase)
    supabase.fail("GET", "blog_likes", 500, message="connection reset")

    resp = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Like check failed"


def test_missing_service_key_is_a_server_error(client):
    app.dependency_overrides[get_settings] = lambda: Settings(supabase_url=SUPABASE_URL)

    resp = client.post("/api/blog/like", json={"post_id": 7, "user_id": "u-1"})

    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "Server misconfiguration"}
