"""Account lifecycle service with an append-only account event log."""
