"""
Access log - records device, browser and approximate location on login.

Best effort only: nothing in here may interrupt the login flow.
"""

import re
from typing import Dict, Optional

import requests
from supabase import Client

from config.app_config import LookupConfig, get_config
from utils.logging_config import get_logger

ACCESS_LOGS_TABLE = "access_logs"
UNKNOWN = "Desconhecido"
UNKNOWN_IP = "0.0.0.0"

MOBILE_PATTERN = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)

# Order matters: Chrome's user agent also contains "Safari", Edge's contains "Chrome"
BROWSER_MARKERS = [
    (("Firefox",), "Mozilla Firefox"),
    (("SamsungBrowser",), "Samsung Internet"),
    (("Opera", "OPR"), "Opera"),
    (("Trident",), "Microsoft Internet Explorer"),
    (("Edge", "Edg/"), "Microsoft Edge"),
    (("Chrome",), "Google Chrome"),
    (("Safari",), "Apple Safari"),
]

logger = get_logger(__name__)


def detect_device_type(user_agent: str) -> str:
    return "Mobile" if MOBILE_PATTERN.search(user_agent or "") else "Desktop"


def detect_browser(user_agent: str) -> str:
    user_agent = user_agent or ""
    for markers, name in BROWSER_MARKERS:
        if any(marker in user_agent for marker in markers):
            return name
    return UNKNOWN


def client_ip_from_headers(headers: Optional[Dict[str, str]]) -> Optional[str]:
    """First hop of X-Forwarded-For, when the app runs behind a proxy"""
    if not headers:
        return None
    forwarded = headers.get("X-Forwarded-For") or headers.get("x-forwarded-for")
    if not forwarded:
        return None
    return forwarded.split(",")[0].strip() or None


def lookup_location(ip_address: Optional[str] = None, config: Optional[LookupConfig] = None) -> Dict[str, str]:
    """
    Resolve IP and "city, region - country" through ipwho.is.

    Returns the unknown placeholders when the lookup fails.
    """
    config = config or get_config().lookup
    result = {"ip_address": ip_address or UNKNOWN_IP, "location": UNKNOWN}

    try:
        response = requests.get(config.ip_lookup_url + (ip_address or ""), timeout=config.timeout_seconds)
        if not response.ok:
            return result
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"IP lookup failed: {e}")
        return result

    if not data.get("success"):
        logger.warning(f"IP lookup returned success=false: {data.get('message')}")
        return result

    result["ip_address"] = data.get("ip") or result["ip_address"]
    result["location"] = f"{data.get('city')}, {data.get('region_code')} - {data.get('country_code')}"
    return result


def register_access_log(client: Client, user_id: str, user_agent: str = "",
                        headers: Optional[Dict[str, str]] = None) -> bool:
    """
    Insert an access_logs row for a successful login

    Returns:
        True if the row was written; failures are logged and swallowed
    """
    try:
        location = lookup_location(client_ip_from_headers(headers))
        client.table(ACCESS_LOGS_TABLE).insert({
            "user_id": user_id,
            "device_type": detect_device_type(user_agent),
            "browser": detect_browser(user_agent),
            "ip_address": location["ip_address"],
            "location": location["location"],
        }).execute()
    except Exception as e:
        logger.error(f"Error saving access log: {e}")
        return False

    logger.info("Access registered", extra={"ip_address": location["ip_address"], "location": location["location"]})
    return True
