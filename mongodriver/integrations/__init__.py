"""Optional web framework integrations. Requires the ``fastapi`` extra."""
