"""Grafana HTTP session.

``Session`` logs in with a user and password, keeps the session cookie in
its ``httpx.Client`` cookie jar and exposes one method per API call. Every
call is a single blocking request; failures raise ``GrafanaError``.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from grafanaclient.config import Settings
from grafanaclient.core.errors import GrafanaError
from grafanaclient.models import (
    Dashboard,
    DashboardResult,
    DashboardUploader,
    DataSource,
    DataSourcePlugin,
    Login,
    Plugin,
)

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "grafanaclient/0.1.0"


class Session:
    """Authenticated connection to a Grafana server."""

    def __init__(
        self,
        user: str,
        password: str,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.user = user
        self.password = password
        self._base_url = url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"Content-Type": "application/json", "User-Agent": user_agent},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Session:
        return cls(
            settings.user,
            settings.password,
            settings.url,
            timeout=settings.timeout,
            verify=settings.verify_tls,
        )

    @property
    def url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("grafana_request", method=method, url=url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("grafana_network_error", method=method, url=url, error=str(exc))
            raise GrafanaError(0, "Unable to perform the http request") from exc

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "grafana_http_error",
                status=response.status_code,
                method=method,
                url=url,
                error=message,
            )
            raise GrafanaError(response.status_code, message)
        return response

    def _get_json(self, path: str, expected: type = object, **kwargs: Any) -> Any:
        response = self._request("GET", path, **kwargs)
        try:
            body = response.json()
        except ValueError as exc:
            raise GrafanaError(0, f"Invalid JSON returned by {path}") from exc
        if body is not None and not isinstance(body, expected):
            raise GrafanaError(
                0,
                f"Unexpected {type(body).__name__} returned by {path}, "
                f"expected {expected.__name__}",
            )
        return body

    def do_logon(self) -> None:
        """Open a session with the stored credentials."""
        login = Login(user=self.user, password=self.password)
        self._request("POST", "/login", json=login.to_dict())
        logger.info("grafana_logged_in", url=self._base_url, user=self.user)

    def create_data_source(self, ds: DataSource) -> None:
        self._request("POST", "/api/datasources", json=ds.to_dict())
        logger.info("datasource_created", name=ds.name, type=ds.type)

    def delete_data_source(self, ds: DataSource) -> None:
        """Delete a data source previously returned by the server (its id is used)."""
        self._request("DELETE", f"/api/datasources/{ds.id}")
        logger.info("datasource_deleted", name=ds.name, id=ds.id)

    def get_data_source_list(self) -> list[DataSource]:
        datasources = self._get_json("/api/datasources", list) or []
        return [DataSource.from_dict(item) for item in datasources]

    def get_data_source(self, name: str) -> DataSource | None:
        """Find a data source by name; None when no data source matches."""
        for ds in self.get_data_source_list():
            if ds.name == name:
                return ds
        return None

    def get_data_source_plugins(self) -> dict[str, DataSourcePlugin]:
        plugins = self._get_json("/api/datasources/plugins", dict) or {}
        return {key: DataSourcePlugin.from_dict(value) for key, value in plugins.items()}

    def get_plugins(self, plugin_type: str) -> list[Plugin]:
        plugins = self._get_json("/api/plugins", list, params={"type": plugin_type}) or []
        return [Plugin.from_dict(item) for item in plugins]

    def get_dashboard(self, slug: str) -> DashboardResult:
        return DashboardResult.from_dict(self._get_json(f"/api/dashboards/db/{slug}", dict) or {})

    def upload_dashboard(self, dashboard: Dashboard, overwrite: bool) -> None:
        """Create a dashboard, replacing one with the same title if ``overwrite``."""
        content = DashboardUploader(dashboard=dashboard, overwrite=overwrite)
        self._request("POST", "/api/dashboards/db", json=content.to_dict())
        logger.info("dashboard_uploaded", title=dashboard.title, overwrite=overwrite)

    def upload_dashboard_string(self, dashboard: str, overwrite: bool) -> None:
        """Validate a dashboard JSON document, then upload it."""
        try:
            data = json.loads(dashboard)
            if not isinstance(data, dict):
                raise TypeError("dashboard must be a JSON object")
            parsed = Dashboard.from_dict(data)
        except (ValueError, TypeError, AttributeError) as exc:
            raise GrafanaError(0, "dashboard template in wrong format") from exc
        self.upload_dashboard(parsed, overwrite)

    def delete_dashboard(self, slug: str) -> None:
        """Look up a dashboard, then delete it through its server-side slug."""
        result = self.get_dashboard(slug)
        self._request("DELETE", f"/api/dashboards/db/{result.meta.slug}")
        logger.info("dashboard_deleted", slug=result.meta.slug)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


__all__ = ["Session", "DEFAULT_TIMEOUT"]
