"""bankcore: UI-independent domain model and balancing rules."""
