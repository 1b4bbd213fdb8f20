"""Infrastructure layer: persistence and command line interface."""
