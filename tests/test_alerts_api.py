from datetime import datetime, timedelta

from matatu.models.alert import DriverAlert
from matatu.utils.clock import utcnow

from conftest import bearer, local_iso, png_bytes, utc_iso


def test_create_alert_returns_camel_case(client, post_alert, driver):
    resp = post_alert()
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["message"] == "Alert created successfully"
    alert = body["alert"]
    assert alert["posterId"] == driver.id
    assert alert["alertType"] == "accident"
    assert alert["severityLevel"] == "high"
    assert alert["locationName"] == "Globe Roundabout"
    assert alert["hasImage"] is False
    assert alert["expiryTime"] is None
    assert alert["username"] == "driver"


def test_severity_defaults_to_medium(post_alert):
    resp = post_alert(severityLevel=None)
    assert resp.status_code == 201, resp.text
    assert resp.json()["alert"]["severityLevel"] == "medium"


def test_invalid_alert_type_names_valid_values(post_alert):
    resp = post_alert(alertType="not_a_real_type")
    assert resp.status_code == 400, resp.text
    msg = resp.json()["error"]
    assert msg.startswith("Invalid alertType")
    for value in ("traffic_jam", "accident", "road_closure", "police_checkpoint", "other"):
        assert value in msg


def test_missing_required_fields(post_alert):
    resp = post_alert(title=None)
    assert resp.status_code == 400
    assert "Missing required fields" in resp.json()["error"]


def test_expiry_must_be_future_and_iso(post_alert):
    past = utc_iso(-timedelta(minutes=5))
    resp = post_alert(expiryTime=past)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Expiry time must be in the future"

    resp = post_alert(expiryTime="tomorrow-ish")
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid expiryTime format")


def test_expiry_with_offset_is_stored_as_utc(post_alert):
    future = (utcnow() + timedelta(hours=3)).replace(microsecond=0)
    nairobi = (future + timedelta(hours=3)).isoformat() + "+03:00"
    resp = post_alert(expiryTime=nairobi)
    assert resp.status_code == 201, resp.text
    assert resp.json()["alert"]["expiryTime"].startswith(future.isoformat())


def test_naive_expiry_is_local_wall_clock(post_alert):
    # an hour ago in Nairobi is still "in the future" if misread as UTC
    resp = post_alert(expiryTime=local_iso(-timedelta(hours=1)))
    assert resp.status_code == 400, resp.text
    assert resp.json()["error"] == "Expiry time must be in the future"

    resp = post_alert(expiryTime=local_iso(timedelta(hours=1)))
    assert resp.status_code == 201, resp.text
    stored = datetime.fromisoformat(resp.json()["alert"]["expiryTime"])
    assert abs(stored - (utcnow() + timedelta(hours=1))) < timedelta(minutes=1)


def test_commuter_cannot_post(post_alert, commuter_headers):
    resp = post_alert(headers=commuter_headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Insufficient permissions"}


def test_anonymous_cannot_post(client):
    resp = client.post("/api/v1/alerts", data={"title": "x"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Authentication required"


def test_get_alert_and_404(client, post_alert):
    alert_id = post_alert().json()["alert"]["id"]
    resp = client.get(f"/api/v1/alerts/{alert_id}")
    assert resp.status_code == 200
    assert resp.json()["id"] == alert_id

    resp = client.get("/api/v1/alerts/999999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Alert not found"}


def test_image_round_trip(client, post_alert):
    data = png_bytes()
    resp = post_alert(files={"image": ("crash.png", data, "image/png")})
    assert resp.status_code == 201, resp.text
    alert = resp.json()["alert"]
    assert alert["hasImage"] is True
    assert alert["imageFilename"] == "crash.png"
    assert alert["imageMimetype"] == "image/png"

    img = client.get(f"/api/v1/alerts/{alert['id']}/image")
    assert img.status_code == 200
    assert img.content == data
    assert img.headers["content-type"] == "image/png"
    assert "inline" in img.headers["content-disposition"]
    assert "max-age=86400" in img.headers["cache-control"]


def test_image_missing_is_404(client, post_alert):
    alert_id = post_alert().json()["alert"]["id"]
    resp = client.get(f"/api/v1/alerts/{alert_id}/image")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Image not found"}


def test_non_image_upload_rejected(post_alert):
    resp = post_alert(files={"image": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Only image files are allowed!"

    # claims to be an image but is not
    resp = post_alert(files={"image": ("fake.png", b"not really a png", "image/png")})
    assert resp.status_code == 400


def test_update_by_poster(client, post_alert, driver_headers):
    alert_id = post_alert().json()["alert"]["id"]
    resp = client.put(
        f"/api/v1/alerts/{alert_id}",
        data={"title": "Cleared partially", "severityLevel": "low"},
        headers=driver_headers,
    )
    assert resp.status_code == 200, resp.text
    alert = resp.json()["alert"]
    assert alert["title"] == "Cleared partially"
    assert alert["severityLevel"] == "low"
    assert alert["description"] == "Two lanes blocked"


def test_update_with_no_fields(client, post_alert, driver_headers):
    alert_id = post_alert().json()["alert"]["id"]
    resp = client.put(f"/api/v1/alerts/{alert_id}", data={}, headers=driver_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "No fields to update"


def test_update_clears_expiry(client, post_alert, driver_headers):
    future = utc_iso(timedelta(hours=1))
    alert_id = post_alert(expiryTime=future).json()["alert"]["id"]

    resp = client.put(f"/api/v1/alerts/{alert_id}", data={"expiryTime": ""}, headers=driver_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["alert"]["expiryTime"] is None

    future = utc_iso(timedelta(hours=2))
    client.put(f"/api/v1/alerts/{alert_id}", data={"expiryTime": future}, headers=driver_headers)
    resp = client.put(f"/api/v1/alerts/{alert_id}", data={"clearExpiry": "true"}, headers=driver_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["alert"]["expiryTime"] is None


def test_foreign_update_is_403_and_leaves_record(client, post_alert, other_driver):
    original = post_alert().json()["alert"]
    resp = client.put(
        f"/api/v1/alerts/{original['id']}",
        data={"title": "hijacked"},
        headers=bearer(other_driver),
    )
    assert resp.status_code == 403
    assert resp.json() == {"error": "You can only update your own alerts"}

    after = client.get(f"/api/v1/alerts/{original['id']}").json()
    assert after == original


def test_update_unknown_alert_is_404(client, driver_headers):
    resp = client.put("/api/v1/alerts/424242", data={"title": "x"}, headers=driver_headers)
    assert resp.status_code == 404


def test_delete_by_poster_only(client, post_alert, driver_headers, other_driver):
    alert_id = post_alert().json()["alert"]["id"]
    resp = client.delete(f"/api/v1/alerts/{alert_id}", headers=bearer(other_driver))
    assert resp.status_code == 403

    resp = client.delete(f"/api/v1/alerts/{alert_id}", headers=driver_headers)
    assert resp.status_code == 200
    assert resp.json()["alert"]["id"] == alert_id
    assert client.get(f"/api/v1/alerts/{alert_id}").status_code == 404


def test_listing_filters_and_pagination(client, post_alert):
    post_alert(alertType="accident", locationName="Thika Road")
    post_alert(alertType="traffic_jam", locationName="Thika Road")
    post_alert(alertType="accident", locationName="Ngong Road")

    resp = client.get("/api/v1/alerts", params={"alertType": "accident", "limit": 1})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert len(body["alerts"]) == 1
    assert body["pagination"] == {
        "currentPage": 1, "totalPages": 2, "totalCount": 2, "hasNext": True, "hasPrev": False,
    }

    resp = client.get("/api/v1/alerts", params={"location": "thika", "page": 999, "limit": 10})
    assert resp.json()["alerts"] == []
    assert resp.json()["pagination"]["hasPrev"] is True

    # limit above the maximum is clamped, not rejected
    resp = client.get("/api/v1/alerts", params={"limit": 1000, "activeOnly": "false"})
    assert resp.status_code == 200
    assert resp.json()["pagination"]["totalPages"] == 1


def test_listing_unknown_severity_is_empty_not_error(client, post_alert):
    post_alert(severityLevel="high")
    resp = client.get("/api/v1/alerts", params={"severityLevel": "bogus"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["alerts"] == []
    assert resp.json()["pagination"]["totalCount"] == 0


def test_listing_rejects_bad_paging(client):
    assert client.get("/api/v1/alerts", params={"page": 0}).status_code == 400
    assert client.get("/api/v1/alerts", params={"limit": 0}).status_code == 400
    resp = client.get("/api/v1/alerts", params={"page": "abc"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_expired_alert_visibility_and_cleanup(client, post_alert, db, admin_headers):
    future = utc_iso(timedelta(hours=1))
    alert_id = post_alert(expiryTime=future, locationName="Kenol").json()["alert"]["id"]
    keep_id = post_alert(locationName="Kenol").json()["alert"]["id"]

    active = client.get("/api/v1/alerts", params={"location": "Kenol"}).json()["alerts"]
    assert alert_id in [a["id"] for a in active]

    row = db.query(DriverAlert).filter(DriverAlert.id == alert_id).one()
    row.expiry_time = utcnow() - timedelta(minutes=1)
    db.commit()

    active = client.get("/api/v1/alerts", params={"location": "Kenol"}).json()["alerts"]
    assert [a["id"] for a in active] == [keep_id]
    everything = client.get("/api/v1/alerts", params={"location": "Kenol", "activeOnly": "false"}).json()
    assert {a["id"] for a in everything["alerts"]} == {alert_id, keep_id}

    first = client.post("/api/v1/alerts/cleanup", headers=admin_headers)
    assert first.status_code == 200, first.text
    assert first.json()["deletedCount"] == 1
    assert [d["id"] for d in first.json()["deleted"]] == [alert_id]

    second = client.post("/api/v1/alerts/cleanup", headers=admin_headers)
    assert second.status_code == 200
    assert second.json()["deletedCount"] == 0
    assert client.get(f"/api/v1/alerts/{keep_id}").status_code == 200


def test_cleanup_requires_admin(client, driver_headers):
    assert client.post("/api/v1/alerts/cleanup", headers=driver_headers).status_code == 403


def test_location_endpoint(client, post_alert):
    post_alert(locationName="Westlands Roundabout")
    post_alert(locationName="Westlands Stage")
    post_alert(locationName="Kencom")
    resp = client.get("/api/v1/alerts/location/westlands")
    assert resp.status_code == 200
    body = resp.json()
    assert body["location"] == "westlands"
    assert body["count"] == 2
    assert all("Westlands" in a["locationName"] for a in body["alerts"])


def test_stats(client, post_alert):
    post_alert(alertType="accident", severityLevel="high")
    post_alert(alertType="accident", severityLevel="low")
    post_alert(alertType="traffic_jam", severityLevel="low")

    resp = client.get("/api/v1/alerts/stats", params={"period": "1d"})
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["period"] == "1d"
    assert stats["totalAlerts"] == 3
    assert stats["activeAlerts"] == 3
    assert stats["byType"][0] == {"alertType": "accident", "count": 2}
    assert stats["bySeverity"][0] == {"severityLevel": "low", "count": 2}

    assert client.get("/api/v1/alerts/stats", params={"period": "5y"}).json()["period"] == "7d"
