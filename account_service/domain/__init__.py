"""Account aggregate, lifecycle rules, and workflows."""
