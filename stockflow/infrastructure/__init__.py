"""Infrastructure adapters: storage, sync providers, audit sinks."""
