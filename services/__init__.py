"""Output services (PDF export of generated plans)."""
