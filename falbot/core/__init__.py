"""Bot bootstrap: the Discord client, CLI flags and service wiring."""
