"""Infrastructure layer: HTTP access, exceptions and fixture storage."""
