"""Infrastructure layer: RouterOS API protocol stack and observability."""
