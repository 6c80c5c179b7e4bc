import httpx


class ApiClient:
    """Shared plumbing for clients of the dashboard REST API."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, token: str = ""):
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"
