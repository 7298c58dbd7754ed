"""Turn orchestration around the tactical engine."""
