"""Document and revision lifecycle."""
