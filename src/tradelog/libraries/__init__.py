"""Pure calculation libraries."""
