"""Cross-cutting primitives: structured logging and cancellation."""
