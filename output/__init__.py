"""Console and email output."""
