"""bankcontent: text content tables (customer feedback)."""
