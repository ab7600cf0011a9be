"""
Module 'payments' (feature-first): montants, client Stripe, métadonnées et gateways.
"""
from .amounts import to_minor_units, from_minor_units, format_amount
from .gateway import PaymentGateway, PaymentStart, HostedCheckoutGateway, PaymentIntentGateway, build_gateway, get_payment_gateway

__all__ = [
    # amounts
    "to_minor_units",
    "from_minor_units",
    "format_amount",
    # gateways
    "PaymentGateway",
    "PaymentStart",
    "HostedCheckoutGateway",
    "PaymentIntentGateway",
    "build_gateway",
    "get_payment_gateway",
]
