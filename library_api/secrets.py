import httpx


def fetch_vault_secret(*, addr: str, token: str, mount: str, path: str) -> dict[str, str]:
    """Read a KV v2 secret; HTTP errors propagate to the caller."""
    url = f"{addr.rstrip('/')}/v1/{mount}/data/{path.lstrip('/')}"
    with httpx.Client(timeout=5.0) as client:
        resp = client.get(url, headers={"X-Vault-Token": token})
        resp.raise_for_status()
        body = resp.json()
    return (body.get("data") or {}).get("data") or {}
