"""Error taxonomy for icon generation.

InvalidInput is a client error (HTTP 400). Everything under GenerationFailure
fails the whole request; there are no partial results.
"""


class IconError(Exception):
    """Base class for icon generation errors."""


class InvalidInput(IconError):
    """Unresolvable code/symbol or missing required field."""


class GenerationFailure(IconError):
    """A request could not produce its full variant matrix."""


class AssetNotFound(GenerationFailure):
    """Raised when a badge asset is missing for a brand/variant pair."""

    def __init__(self, brand: str, variant: str, reason: str = "not found"):
        self.brand = brand
        self.variant = variant
        super().__init__(f"Badge '{variant}' for brand '{brand}': {reason}")


class ExternalFetchFailure(GenerationFailure):
    """Raised when flag art cannot be retrieved."""

    def __init__(self, country_code: str, reason: str):
        self.country_code = country_code
        super().__init__(f"Failed to fetch flag '{country_code}': {reason}")


class RenderFailure(GenerationFailure):
    """Raised when markup cannot be rasterized (composition bug)."""
