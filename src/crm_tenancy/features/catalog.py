"""Known feature names and the flag sets tenants start with."""

AI_TOOLS = "aiTools"
API_ACCESS = "apiAccess"
WHITE_LABEL = "whiteLabel"
MULTI_TENANT = "multiTenant"
VOICE_ANALYSIS = "voiceAnalysis"
CUSTOM_BRANDING = "customBranding"
DOCUMENT_ANALYSIS = "documentAnalysis"
ADVANCED_ANALYTICS = "advancedAnalytics"

FEATURES = (
    AI_TOOLS,
    API_ACCESS,
    WHITE_LABEL,
    MULTI_TENANT,
    VOICE_ANALYSIS,
    CUSTOM_BRANDING,
    DOCUMENT_ANALYSIS,
    ADVANCED_ANALYTICS,
)

PARTNER_FLAGS: dict[str, bool] = {feature: True for feature in FEATURES}

CUSTOMER_FLAGS: dict[str, bool] = {
    **PARTNER_FLAGS,
    WHITE_LABEL: False,
    MULTI_TENANT: False,
    CUSTOM_BRANDING: False,
}

DEFAULT_TENANT_FLAGS: dict[str, bool] = dict(CUSTOMER_FLAGS)
