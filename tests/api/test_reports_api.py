import pytest


@pytest.fixture()
def alice(make_user, make_client):
    make_user("alice")
    return make_client("alice")


@pytest.fixture()
def admin(make_user, make_client):
    make_user("root", is_admin=True)
    return make_client("root")


def _report(client, job_id, comments="This job no longer exists", reason="ghost_listing"):
    return client.post("/api/job-reports", json={"jobId": job_id, "reason": reason, "comments": comments})


class TestJobReports:
    def test_submit(self, alice, make_job) -> None:
        res = _report(alice, make_job().id)
        assert res.status_code == 201
        assert res.json()["status"] == "pending"

    @pytest.mark.parametrize("length,expected", [(4, 400), (5, 201), (500, 201), (501, 400)])
    def test_comment_bounds(self, alice, make_job, length, expected) -> None:
        res = _report(alice, make_job().id, comments="a" * length)
        assert res.status_code == expected

    def test_field_errors(self, alice, make_job) -> None:
        res = alice.post("/api/job-reports", json={"jobId": make_job().id})
        assert res.status_code == 400
        assert set(res.json()["errors"]) == {"reason", "comments"}

    def test_unknown_job(self, alice) -> None:
        assert _report(alice, 999).status_code == 404

    def test_requires_login(self, client, make_job) -> None:
        assert _report(client, make_job().id).status_code == 401

    def test_admin_review_flow(self, alice, admin, make_job) -> None:
        report_id = _report(alice, make_job().id).json()["id"]

        listed = admin.get("/api/job-reports", params={"status": "pending"}).json()
        assert listed[0]["jobTitle"] == "Backend Engineer"
        assert listed[0]["reporter"] == "alice"

        res = admin.patch(f"/api/job-reports/{report_id}", json={"status": "dismissed", "adminNotes": "fine"})
        assert res.status_code == 200
        assert res.json()["reviewedAt"] is not None

        assert admin.get("/api/job-reports", params={"status": "pending"}).json() == []

        assert admin.delete(f"/api/job-reports/{report_id}").json() == {"message": "Report deleted successfully"}
        assert admin.delete(f"/api/job-reports/{report_id}").status_code == 404
