from zmupload.request_context import RequestContext


def test_reads_user_agent_and_first_forwarded_address():
    context = RequestContext.from_environ(
        {
            "HTTP_USER_AGENT": "Mozilla/5.0",
            "HTTP_X_FORWARDED_FOR": "203.0.113.7, 10.0.0.1",
            "REMOTE_ADDR": "10.0.0.1",
        }
    )
    assert context == RequestContext(user_agent="Mozilla/5.0", client_ip="203.0.113.7")
    assert context.headers() == {
        "User-Agent": "Mozilla/5.0",
        "X-Forwarded-For": "203.0.113.7",
    }


def test_client_ip_header_takes_precedence():
    context = RequestContext.from_environ(
        {"HTTP_CLIENT_IP": "198.51.100.2", "HTTP_X_FORWARDED_FOR": "203.0.113.7"}
    )
    assert context.client_ip == "198.51.100.2"


def test_empty_values_are_skipped():
    context = RequestContext.from_environ(
        {"HTTP_CLIENT_IP": "", "HTTP_X_FORWARDED_FOR": " , 10.0.0.2", "REMOTE_ADDR": "127.0.0.1"}
    )
    assert context.client_ip == "127.0.0.1"


def test_empty_environment_gives_no_headers():
    context = RequestContext.from_environ({})
    assert context == RequestContext()
    assert context.headers() == {}


def test_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("REMOTE_ADDR", "192.0.2.10")
    for key in ("HTTP_CLIENT_IP", "HTTP_X_FORWARDED_FOR", "HTTP_X_FORWARDED", "HTTP_FORWARDED_FOR", "HTTP_FORWARDED"):
        monkeypatch.delenv(key, raising=False)
    assert RequestContext.from_environ().client_ip == "192.0.2.10"
