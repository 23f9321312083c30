"""Status page watcher: scrape provider incidents, store them, queue new updates and notify Discord."""

__version__ = "0.1.0"