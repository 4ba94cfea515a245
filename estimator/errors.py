"""Error types raised by the estimator core."""

from pydantic import ValidationError


class EstimateValidationError(ValueError):
    """Dimensions or options rejected before any quantity is derived."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, project_type: str, exc: ValidationError) -> "EstimateValidationError":
        errors = [
            {
                "loc": list(err.get("loc", ())),
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        summary = "; ".join(
            "%s: %s" % (".".join(str(p) for p in e["loc"]) or project_type, e["msg"])
            for e in errors
        )
        return cls(f"Invalid {project_type} input: {summary}", errors)


class UnknownProjectTypeError(ValueError):
    """No calculator is registered for the requested project type."""


class MarketPriceError(RuntimeError):
    """The AI market-price request failed (network, HTTP status, or parse)."""
