"""Infrastructure layer: backtrace parsing and payload truncation."""
