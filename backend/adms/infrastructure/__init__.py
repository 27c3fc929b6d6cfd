"""Infrastructure adapters: entity store, file store and document locks."""
