"""Pure request/response types and classification rules."""
