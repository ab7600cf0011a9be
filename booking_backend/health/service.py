from typing import Any, Dict
from urllib.parse import urlparse
import socket

import booking_backend.infra.supabase_client as supabase_client
from booking_backend.config import SUPABASE_URL

TABLES = ("bookings", "services")

def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": type(e).__name__}

def health_supabase_info() -> Dict[str, Any]:
    """
    Diagnostic Supabase: résolution DNS de l'hôte puis lecture d'une ligne par table.
    Les messages d'erreur bruts ne sont pas exposés (seul le type d'exception).
    """
    hostname = urlparse(SUPABASE_URL).hostname if SUPABASE_URL else None
    info: Dict[str, Any] = {
        "hostname": hostname,
        "dns_ok": None,
        "connect_ok": False,
        "tables": {},
    }
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            info["dns_ok"] = True
        except OSError:
            info["dns_ok"] = False
    try:
        client = supabase_client.get_service_supabase()
    except Exception as e:
        info["error"] = type(e).__name__
        return info
    for t in TABLES:
        info["tables"][t] = _check_table(client, t)
    info["connect_ok"] = all(t["ok"] for t in info["tables"].values())
    return info
