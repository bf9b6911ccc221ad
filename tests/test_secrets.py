import httpx
import pytest

from library_api.secrets import fetch_vault_secret


@pytest.fixture()
def vault(monkeypatch):
    seen: list[httpx.Request] = []
    responses: list[httpx.Response] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responses.pop(0)

    real_client = httpx.Client

    def client_factory(timeout=5.0):
        return real_client(transport=httpx.MockTransport(handler), timeout=timeout)

    monkeypatch.setattr(httpx, "Client", client_factory)
    return seen, responses


def test_reads_kv2_payload(vault):
    seen, responses = vault
    responses.append(httpx.Response(200, json={"data": {"data": {"api_key": "from-vault"}}}))

    secret = fetch_vault_secret(addr="http://vault:8200/", token="s.abc", mount="kv", path="/library-api/config")

    assert secret == {"api_key": "from-vault"}
    assert str(seen[0].url) == "http://vault:8200/v1/kv/data/library-api/config"
    assert seen[0].headers["X-Vault-Token"] == "s.abc"


def test_missing_data_yields_empty_mapping(vault):
    _, responses = vault
    responses.append(httpx.Response(200, json={"data": None}))
    assert fetch_vault_secret(addr="http://vault", token="t", mount="kv", path="library-api/config") == {}


def test_http_errors_propagate(vault):
    _, responses = vault
    responses.append(httpx.Response(403, json={"errors": ["permission denied"]}))
    with pytest.raises(httpx.HTTPStatusError):
        fetch_vault_secret(addr="http://vault", token="bad", mount="kv", path="library-api/config")
