"""Infrastructure: settings, input streams, logging."""
