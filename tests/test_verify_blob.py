from scripts.verify_blob import check_blob


def test_check_blob_reports_ok_and_failures():
    ok = check_blob('[{"id": "a", "value": 1000}, {"id": "b", "value": 2000}]')
    assert ok["status"] == "ok" and ok["total"] == 3000 and ok["unique_ids"]
    bad = check_blob('[{"id": "a"}, 5]')
    assert bad["status"] == "failed" and bad["skipped"] == 2
    broken = check_blob("{")
    assert broken["status"] == "failed" and broken["error"].startswith("invalid_json")
    assert check_blob(None)["status"] == "ok"
