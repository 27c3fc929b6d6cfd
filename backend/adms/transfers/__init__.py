"""Cross-matter document transfers (move/copy) and their file journal."""
