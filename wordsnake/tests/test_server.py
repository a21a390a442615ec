from dataclasses import replace

from wordsnake.api import server


def test_main_runs_app_with_settings(monkeypatch):
    calls = []
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(
        server, "settings", replace(server.settings, host="0.0.0.0", port=9001, log_level="DEBUG")
    )
    server.main()
    assert calls == [
        ("wordsnake.api.app:app", {"host": "0.0.0.0", "port": 9001, "log_level": "debug"})
    ]
