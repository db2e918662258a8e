"""ExitMatch scoring core: buyer/business match scoring and business valuation."""

__version__ = "0.1.0"
