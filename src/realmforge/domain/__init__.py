"""Domain layer: business objects independent of persistence."""
