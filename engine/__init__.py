"""Team allocation and scoring engine."""
