"""Opening performance graph built from a player's games."""
