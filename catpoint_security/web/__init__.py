"""JSON control surface for the home security system."""
