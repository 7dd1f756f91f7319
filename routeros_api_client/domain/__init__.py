"""Domain layer: report models and services built on the RouterOS API client."""
