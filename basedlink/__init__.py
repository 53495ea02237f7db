"""BasedLink backend: LinkedIn post generation paid for with on-chain USDC."""

__version__ = "1.0.0"
