from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert titles == ["PDF Tools"]
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_returns_json_envelope():
    client = create_app("TestingConfig").test_client()
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "not_found"


def test_yaml_settings_reach_plugins():
    app = create_app("TestingConfig")
    settings = app.config["PLUGIN_SETTINGS"]["pdf_tools"]
    assert settings["codec"] == "pypdf2"
    assert settings["split_upload"]["max_files"] == 1
