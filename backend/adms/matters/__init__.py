"""Matter lifecycle."""
