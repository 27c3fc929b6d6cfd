"""Domain layer: activity vocabulary, errors, validation and ports."""
