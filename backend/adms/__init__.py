"""ADMS core: audit-linked document lifecycle and cross-matter transfers."""
