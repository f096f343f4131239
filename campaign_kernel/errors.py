"""
Error taxonomy for the campaign kernel.

Business-rule failures (ineligible actions, paused campaigns, endorsement
cooldowns) are never raised: engines return them as structured results.
The exceptions below cover programmer errors only, where a key or code does
not match the bundled reference tables. They fail fast.
"""


class CampaignDataError(Exception):
    """Raised when input data does not match the kernel's reference tables."""
    pass


class UnknownActionTypeError(CampaignDataError):
    """Raised for an action type outside the action catalogue."""
    pass


class UnknownDemographicKeyError(CampaignDataError):
    """Raised when a demographic key cannot be parsed into race/class/gender."""
    pass


class UnknownStateError(CampaignDataError):
    """Raised for a state code with no electoral or composition data."""
    pass
