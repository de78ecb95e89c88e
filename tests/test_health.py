from conftest import build_app, register


def test_liveness(client):
    response = client.get("/api/test")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Server is running"


def test_database_check(client):
    response = client.get("/api/test-db")
    assert response.status_code == 200
    assert response.get_json() == {"connected": True, "result": 2}


def test_security_headers(client):
    response = client.get("/api/statistics")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in response.headers


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.get_json() == {"message": "Not found"}


def test_stats_cli_command(app, make_case):
    make_case(status="found")
    result = app.test_cli_runner().invoke(args=["stats"])
    assert result.exit_code == 0
    assert '"foundPersons": 1' in result.output


def test_log_records_carry_request_context(tmp_path):
    app = build_app(tmp_path, backend="memory")
    client = app.test_client()
    register(client, username="maria")
    client.get("/api/nothing-here")

    log = (tmp_path / "logs" / "registry.log").read_text(encoding="utf-8")
    assert "GET /api/nothing-here user=1 | 404 Not Found" in log
    assert "- - user=- | Logging initialized" in log
