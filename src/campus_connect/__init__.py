"""Campus Connect: clubs, events and their moderation workflow."""
