from src.planner.config import PlannerConfig


def test_defaults(monkeypatch):
    for name in ("EVENTHUB_API_URL", "EVENTHUB_TOKEN", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config = PlannerConfig(_env_file=None)
    assert config.eventhub_api_url == "http://localhost:3001"
    assert config.eventhub_token == ""
    assert config.request_timeout == 30.0
    assert config.state_dir == "data/import_mappings"
    assert config.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("EVENTHUB_API_URL", "https://events.example.com")
    monkeypatch.setenv("eventhub_token", "secret")
    monkeypatch.setenv("REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("LOG_JSON", "true")
    config = PlannerConfig(_env_file=None)
    assert config.eventhub_api_url == "https://events.example.com"
    assert config.eventhub_token == "secret"
    assert config.request_timeout == 5.0
    assert config.log_json is True
