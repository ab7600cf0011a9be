"""
Lancement local de l'API de réservation: `python -m booking_backend` (ou le script `booking-backend`).

Environnement lu au démarrage:
- HOST / PORT: adresse d'écoute (0.0.0.0:8000 par défaut)
- UVICORN_RELOAD: "1"/"true"/"yes" pour le rechargement auto en dev
- LOG_LEVEL: niveau de logs uvicorn, qui configure aussi les loggers de l'app
- FORWARDED_ALLOW_IPS: proxys dont X-Forwarded-For est cru (127.0.0.1 par défaut); sert de clé au rate limiting
"""
import os
import uvicorn

def main() -> None:
    uvicorn.run(
        "booking_backend.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        proxy_headers=True,
        forwarded_allow_ips=os.environ.get("FORWARDED_ALLOW_IPS", "127.0.0.1"),
    )

if __name__ == "__main__":
    main()
