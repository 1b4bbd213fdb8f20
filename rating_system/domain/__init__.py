"""Domain layer: entities, errors, pagination and the repository port."""
