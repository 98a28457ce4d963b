"""Scale endpoint tests."""

from fastapi.testclient import TestClient


class TestInstrumentListing:
    """Tests for GET /scales."""

    def test_lists_all_instruments(self, client: TestClient) -> None:
        """Test every instrument is listed with its version."""
        response = client.get("/api/v1/scales")

        assert response.status_code == 200
        data = response.json()
        assert {item["instrument"] for item in data} == {
            "pandas",
            "kovacevic",
            "pans31",
            "ptec",
            "cbi",
        }
        assert all(item["score_version"] for item in data)


class TestScoreEndpoint:
    """Tests for POST /scales/{instrument}/score."""

    def test_score_pans31(self, client: TestClient, make_pans31_answers) -> None:
        """Test scoring returns scores without saving."""
        response = client.post(
            "/api/v1/scales/pans31/score",
            json={"answers": make_pans31_answers(0)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["instrument"] == "pans31"
        assert data["score_version"] == "1.0.0"
        assert data["scores"]["total"] == 0
        assert data["scores"]["severity"] == "minimal"
        assert data["scores"]["high_severity_items"] == []

    def test_score_does_not_persist(
        self, client: TestClient, memory_store, make_cbi_answers
    ) -> None:
        """Test the score endpoint stores nothing."""
        client.post("/api/v1/scales/cbi/score", json={"answers": make_cbi_answers(1)})

        assert memory_store.records == {}

    def test_score_kovacevic(self, client: TestClient, make_kovacevic_answers) -> None:
        """Test a diagnostic evaluation over HTTP."""
        response = client.post(
            "/api/v1/scales/kovacevic/score",
            json={"answers": make_kovacevic_answers(mandatory="yes", core=3)},
        )

        assert response.status_code == 200
        scores = response.json()["scores"]
        assert scores["outcome"] == "formula1"
        assert scores["confidence"]["total"] == 85

    def test_incomplete_answers_rejected(self, client: TestClient, make_pans31_answers) -> None:
        """Test a missing item returns 422 with the error type."""
        answers = make_pans31_answers(0)
        del answers["hallucinations"]

        response = client.post("/api/v1/scales/pans31/score", json={"answers": answers})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "IncompleteInputError"
        assert "hallucinations" in data["detail"]

    def test_out_of_range_rejected(self, client: TestClient, make_ptec_answers) -> None:
        """Test an out-of-range rating returns 422."""
        answers = make_ptec_answers(0)
        answers["tics"]["vocal_tics"] = 9

        response = client.post("/api/v1/scales/ptec/score", json={"answers": answers})

        assert response.status_code == 422
        assert response.json()["error"] == "RatingRangeError"

    def test_unexpected_item_rejected(self, client: TestClient, make_cbi_answers) -> None:
        """Test an unknown item returns 422."""
        answers = make_cbi_answers(0)
        answers["extra"] = {}

        response = client.post("/api/v1/scales/cbi/score", json={"answers": answers})

        assert response.status_code == 422
        assert response.json()["error"] == "UnexpectedItemError"

    def test_unknown_instrument(self, client: TestClient) -> None:
        """Test an unknown instrument returns 404."""
        response = client.post("/api/v1/scales/phq9/score", json={"answers": {}})

        assert response.status_code == 404

    def test_missing_body(self, client: TestClient) -> None:
        """Test a request without answers fails validation."""
        response = client.post("/api/v1/scales/cbi/score", json={})

        assert response.status_code == 422


class TestSubmissionEndpoint:
    """Tests for POST /scales/{instrument}/submissions."""

    def test_submission_saved(self, client: TestClient, memory_store, make_cbi_answers) -> None:
        """Test a submission is saved and can be fetched."""
        response = client.post(
            "/api/v1/scales/cbi/submissions",
            json={"answers": make_cbi_answers(2), "session_id": "s-1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["saved"] is True
        assert data["save_error"] is None
        assert data["result_id"] in memory_store.records

        stored = client.get(f"/api/v1/scales/results/{data['result_id']}")
        assert stored.status_code == 200
        assert stored.json()["scores"]["total"] == 48
        assert stored.json()["session_id"] == "s-1"
        assert stored.json()["instrument"] == "cbi"

    def test_submission_save_failure_still_returns_scores(
        self, failing_client: TestClient, make_pans31_answers
    ) -> None:
        """Test a failed save returns 200 with the scores and a notice."""
        response = failing_client.post(
            "/api/v1/scales/pans31/submissions",
            json={"answers": make_pans31_answers(2)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["saved"] is False
        assert data["result_id"] is None
        assert data["save_error"]
        assert data["scores"]["total"] == 62
        assert data["scores"]["severity"] == "moderate"

    def test_invalid_submission_not_saved(
        self, client: TestClient, memory_store, make_pans31_answers
    ) -> None:
        """Test invalid answers are rejected before any save."""
        response = client.post(
            "/api/v1/scales/pans31/submissions",
            json={"answers": make_pans31_answers(0, pain=-1)},
        )

        assert response.status_code == 422
        assert memory_store.records == {}


class TestStoredResults:
    """Tests for reading stored results."""

    def test_unknown_result(self, client: TestClient) -> None:
        """Test an unknown id returns 404."""
        response = client.get("/api/v1/scales/results/5b0c5a0e-0f3c-4b5b-9d4e-2b0c8a1f9e11")

        assert response.status_code == 404

    def test_malformed_result_id(self, client: TestClient) -> None:
        """Test a non-UUID id returns 404."""
        response = client.get("/api/v1/scales/results/not-a-uuid")

        assert response.status_code == 404

    def test_list_recent(self, client: TestClient, make_ptec_answers, make_cbi_answers) -> None:
        """Test listing returns only the instrument's results."""
        for default in (0, 1, 2):
            client.post(
                "/api/v1/scales/ptec/submissions",
                json={"answers": make_ptec_answers(default)},
            )
        client.post("/api/v1/scales/cbi/submissions", json={"answers": make_cbi_answers(0)})

        response = client.get("/api/v1/scales/ptec/results", params={"limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert all(item["instrument"] == "ptec" for item in data)

    def test_list_limit_validated(self, client: TestClient) -> None:
        """Test limits outside the allowed range are rejected."""
        response = client.get("/api/v1/scales/ptec/results", params={"limit": 0})

        assert response.status_code == 422

    def test_storage_unavailable(self, failing_client: TestClient) -> None:
        """Test listing reports 503 when storage is down."""
        response = failing_client.get("/api/v1/scales/cbi/results")

        assert response.status_code == 503


class TestSummaryEndpoint:
    """Tests for GET /scales/{instrument}/summary."""

    def test_summary(self, client: TestClient, make_cbi_answers) -> None:
        """Test stored results are summarized."""
        for rating in (0, 2, 4):
            client.post(
                "/api/v1/scales/cbi/submissions",
                json={"answers": make_cbi_answers(rating)},
            )

        response = client.get("/api/v1/scales/cbi/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["instrument"] == "cbi"
        assert data["skipped"] == 0
        assert data["summary"]["count"] == 3
        assert data["summary"]["needs_respite_count"] == 2
        assert data["summary"]["burden_counts"]["severe"] == 1

    def test_summary_without_results(self, client: TestClient) -> None:
        """Test an instrument with nothing stored returns an empty summary."""
        response = client.get("/api/v1/scales/pans31/summary")

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["count"] == 0
        assert summary["common_high_severity_items"] == []

    def test_summary_unknown_instrument(self, client: TestClient) -> None:
        """Test an unknown instrument returns 404."""
        response = client.get("/api/v1/scales/phq9/summary")

        assert response.status_code == 404

    def test_summary_storage_unavailable(self, failing_client: TestClient) -> None:
        """Test a storage outage returns 503."""
        response = failing_client.get("/api/v1/scales/kovacevic/summary")

        assert response.status_code == 503


class TestSessionHistoryEndpoint:
    """Tests for GET /scales/sessions/{session_id}/results."""

    def test_session_history(
        self, client: TestClient, make_pans31_answers, make_cbi_answers
    ) -> None:
        """Test only the session's results are listed."""
        client.post(
            "/api/v1/scales/pans31/submissions",
            json={"answers": make_pans31_answers(1), "session_id": "s-1"},
        )
        client.post(
            "/api/v1/scales/cbi/submissions",
            json={"answers": make_cbi_answers(1), "session_id": "s-1"},
        )
        client.post(
            "/api/v1/scales/cbi/submissions",
            json={"answers": make_cbi_answers(1), "session_id": "s-2"},
        )

        response = client.get("/api/v1/scales/sessions/s-1/results")
        cbi_only = client.get(
            "/api/v1/scales/sessions/s-1/results", params={"instrument": "cbi"}
        )

        assert response.status_code == 200
        assert len(response.json()) == 2
        assert all(item["session_id"] == "s-1" for item in response.json())
        assert [item["instrument"] for item in cbi_only.json()] == ["cbi"]

    def test_unknown_session(self, client: TestClient) -> None:
        """Test a session with no results returns an empty list."""
        response = client.get("/api/v1/scales/sessions/nobody/results")

        assert response.status_code == 200
        assert response.json() == []

    def test_unknown_instrument_filter(self, client: TestClient) -> None:
        """Test an unknown instrument filter returns 404."""
        response = client.get(
            "/api/v1/scales/sessions/s-1/results", params={"instrument": "phq9"}
        )

        assert response.status_code == 404

    def test_history_storage_unavailable(self, failing_client: TestClient) -> None:
        """Test a storage outage returns 503."""
        response = failing_client.get("/api/v1/scales/sessions/s-1/results")

        assert response.status_code == 503
