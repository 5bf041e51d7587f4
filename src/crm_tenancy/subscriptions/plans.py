"""Subscription plan tier templates.

Each tier defines a price, the feature ceiling (``features``: name -> bool)
and numeric caps (``usage_limits``). A tenant can never use a feature its
plan does not enable, whatever its own flags say.
"""

from decimal import Decimal
from typing import Any

from crm_tenancy.features.catalog import (
    ADVANCED_ANALYTICS,
    AI_TOOLS,
    API_ACCESS,
    CUSTOM_BRANDING,
    DOCUMENT_ANALYSIS,
    FEATURES,
    MULTI_TENANT,
    VOICE_ANALYSIS,
    WHITE_LABEL,
)

CUSTOMER_TIERS = ("basic", "professional", "enterprise")

_ALL_ON = {feature: True for feature in FEATURES}

PLAN_TIERS: dict[str, dict[str, Any]] = {
    "default": {
        "name": "Default Plan",
        "price": Decimal("0"),
        "features": {
            **_ALL_ON,
            WHITE_LABEL: False,
            MULTI_TENANT: False,
            CUSTOM_BRANDING: False,
        },
        "usage_limits": {"maxUsers": 1000, "maxContacts": 10000, "maxDeals": 5000},
    },
    "partner": {
        "name": "Partner Plan",
        "price": Decimal("0"),
        "features": dict(_ALL_ON),
        "usage_limits": {
            "maxUsers": 1000,
            "maxApiCalls": 100000,
            "maxStorageGB": 100,
            "aiCredits": 10000,
        },
    },
    "basic": {
        "name": "Basic Plan",
        "price": Decimal("49"),
        "features": {
            AI_TOOLS: True,
            API_ACCESS: True,
            DOCUMENT_ANALYSIS: True,
            VOICE_ANALYSIS: False,
            ADVANCED_ANALYTICS: False,
            CUSTOM_BRANDING: False,
        },
        "usage_limits": {
            "maxUsers": 10, "maxApiCalls": 10000, "maxStorageGB": 10, "aiCredits": 1000,
        },
    },
    "professional": {
        "name": "Professional Plan",
        "price": Decimal("99"),
        "features": {
            AI_TOOLS: True,
            API_ACCESS: True,
            DOCUMENT_ANALYSIS: True,
            VOICE_ANALYSIS: True,
            ADVANCED_ANALYTICS: True,
            CUSTOM_BRANDING: True,
        },
        "usage_limits": {
            "maxUsers": 50, "maxApiCalls": 50000, "maxStorageGB": 50, "aiCredits": 5000,
        },
    },
    "enterprise": {
        "name": "Enterprise Plan",
        "price": Decimal("199"),
        "features": {
            AI_TOOLS: True,
            API_ACCESS: True,
            DOCUMENT_ANALYSIS: True,
            VOICE_ANALYSIS: True,
            ADVANCED_ANALYTICS: True,
            CUSTOM_BRANDING: True,
        },
        "usage_limits": {
            "maxUsers": 200, "maxApiCalls": 200000, "maxStorageGB": 200, "aiCredits": 20000,
        },
    },
}


def get_tier(plan_type: str) -> dict[str, Any]:
    """Return a copy of a tier template. Raises ValueError for unknown tiers."""
    try:
        tier = PLAN_TIERS[plan_type]
    except KeyError:
        valid = ", ".join(sorted(PLAN_TIERS))
        raise ValueError(f"Unknown plan type {plan_type!r} (expected one of: {valid})") from None
    return {
        "name": tier["name"],
        "price": tier["price"],
        "features": dict(tier["features"]),
        "usage_limits": dict(tier["usage_limits"]),
    }
