"""Core building blocks for wikisession."""
