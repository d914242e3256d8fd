from typing import Any, Dict, Optional
import os

import requests


PREFERENCES_PATH = "/api/v1/notifications/preferences"


def _resolve_base_url() -> str:
    """Resolve the notifications service base URL from env variables.
    Tries NOTIFICATION_SERVICE_URL, then NOTIFICATION_SERVICE_HOST/NOTIFICATION_SERVICE_PORT.
    Raises RuntimeError if not configured.
    """
    base_url = os.getenv("NOTIFICATION_SERVICE_URL")
    if not base_url:
        host = os.getenv("NOTIFICATION_SERVICE_HOST")
        port = os.getenv("NOTIFICATION_SERVICE_PORT")
        if host and port:
            base_url = f"http://{host}:{port}"
    if not base_url:
        raise RuntimeError("NOTIFICATION_SERVICE_URL/host:port not configured")
    return base_url.rstrip("/")


def _build_headers(access_token: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {access_token}",
    }


def push_create_preferences(access_token: str, payload: Dict[str, Any], timeout: int = 10) -> requests.Response:
    """POST new notification preferences for the token's user."""
    url = f"{_resolve_base_url()}{PREFERENCES_PATH}/"
    return requests.post(url, json=payload, headers=_build_headers(access_token), timeout=timeout)


def push_update_preferences(access_token: str, payload: Dict[str, Any], timeout: int = 10) -> requests.Response:
    """PUT a partial preferences update."""
    url = f"{_resolve_base_url()}{PREFERENCES_PATH}/"
    return requests.put(url, json=payload, headers=_build_headers(access_token), timeout=timeout)


def push_toggle_preferences(access_token: str, is_active: bool, timeout: int = 10) -> requests.Response:
    url = f"{_resolve_base_url()}{PREFERENCES_PATH}/toggle"
    return requests.patch(url, json={"is_active": is_active}, headers=_build_headers(access_token), timeout=timeout)


def push_delete_preferences(access_token: str, timeout: int = 10) -> requests.Response:
    url = f"{_resolve_base_url()}{PREFERENCES_PATH}/"
    return requests.delete(url, headers=_build_headers(access_token), timeout=timeout)


def fetch_schedule_info(access_token: str, timeout: int = 10) -> Optional[Dict[str, Any]]:
    """GET the scheduled times and next fire time; None when no preferences exist."""
    url = f"{_resolve_base_url()}{PREFERENCES_PATH}/jobs"
    r = requests.get(url, headers=_build_headers(access_token), timeout=timeout)
    r.raise_for_status()
    return r.json()
