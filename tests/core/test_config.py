from quizduel.core.config import Settings


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("QUIZDUEL_API_BASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.match_sync_interval_seconds == 1.0
    assert settings.notification_poll_interval_seconds == 5.0
    assert settings.queue_poll_interval_seconds == 2.0
    assert settings.match_sync_follow_server_round is True


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("QUIZDUEL_API_BASE_URL", "https://duel.example.test")
    monkeypatch.setenv("QUIZDUEL_NOTIFICATION_POLL_INTERVAL_SECONDS", "7.5")
    monkeypatch.setenv("QUIZDUEL_MATCH_SYNC_FOLLOW_SERVER_ROUND", "false")

    settings = Settings(_env_file=None)

    assert settings.api_base_url == "https://duel.example.test"
    assert settings.notification_poll_interval_seconds == 7.5
    assert settings.match_sync_follow_server_round is False
