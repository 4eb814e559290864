"""Read side of the instrument catalog."""
