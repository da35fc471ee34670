"""Service layer: the operations routes delegate to."""
