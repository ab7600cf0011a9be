# booking_backend.config
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend de réservation.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), CORS/hosts
- Fournit les URLs de redirection du checkout (succès/annulation)
- Regroupe le tout dans Settings, injecté dans les gateways (aucune lecture d'env côté métier)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _split_env(v: str) -> List[str]:
    return [x.strip() for x in (v or "").split(",") if x.strip()]

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clés publique/privée et secret webhook
STRIPE_PUBLISHABLE_KEY = _clean_env(os.getenv("STRIPE_PUBLISHABLE_KEY") or os.getenv("VITE_STRIPE_PUBLISHABLE_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# "checkout" (session hébergée) ou "payment_intent" (Payment Element embarqué)
PAYMENT_STRATEGY = _clean_env(os.getenv("PAYMENT_STRATEGY") or "checkout").lower()
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "gbp").lower()

# Front: URL publique et pages de succès/annulation du checkout
SITE_URL = _clean_env(os.getenv("SITE_URL") or "http://localhost:5173").rstrip("/")
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/booking-success")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/booking-cancelled")

# CORS / hosts
CORS_ORIGINS = _split_env(os.getenv("CORS_ORIGINS", SITE_URL))
ALLOWED_HOSTS = _split_env(os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver"))
# HSTS: à activer uniquement derrière HTTPS
ENABLE_HSTS = (os.getenv("ENABLE_HSTS", "false").lower() == "true")

# Clé d'accès aux listings clients (back-office)
ADMIN_API_KEY = _clean_env(os.getenv("ADMIN_API_KEY") or "")


@dataclass(frozen=True)
class Settings:
    """Configuration figée injectée dans les gateways à la construction."""
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    stripe_webhook_secret: str = ""
    payment_strategy: str = "checkout"
    currency: str = "gbp"
    site_url: str = "http://localhost:5173"
    success_path: str = "/booking-success"
    cancel_path: str = "/booking-cancelled"
    admin_api_key: str = ""
    time_slots: Tuple[str, ...] = tuple(f"{h:02d}:00" for h in range(9, 18))

    @property
    def success_url(self) -> str:
        # {CHECKOUT_SESSION_ID} est substitué par Stripe à la redirection
        return f"{self.site_url}{self.success_path}?session_id={{CHECKOUT_SESSION_ID}}"

    def cancel_url(self, booking_id: str) -> str:
        return f"{self.site_url}{self.cancel_path}?booking_id={booking_id}"


def get_settings() -> Settings:
    """Construit Settings à partir des constantes chargées depuis l'environnement."""
    return Settings(
        stripe_secret_key=STRIPE_SECRET_KEY,
        stripe_publishable_key=STRIPE_PUBLISHABLE_KEY,
        stripe_webhook_secret=STRIPE_WEBHOOK_SECRET,
        payment_strategy=PAYMENT_STRATEGY,
        currency=PAYMENT_CURRENCY,
        site_url=SITE_URL,
        success_path=CHECKOUT_SUCCESS_PATH,
        cancel_path=CHECKOUT_CANCEL_PATH,
        admin_api_key=ADMIN_API_KEY,
    )
