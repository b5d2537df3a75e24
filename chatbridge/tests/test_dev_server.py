from chatbridge.service import dev_server


def test_main_reads_env(monkeypatch):
    calls = []
    monkeypatch.setattr(dev_server.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    monkeypatch.setenv("CHATBRIDGE_HOST", "0.0.0.0")
    monkeypatch.setenv("CHATBRIDGE_PORT", "not-a-port")
    monkeypatch.setenv("CHATBRIDGE_RELOAD", "0")
    dev_server.main()
    assert calls == [("chatbridge.service.app:app", {"host": "0.0.0.0", "port": 8787, "reload": False})]  # nosec B101
