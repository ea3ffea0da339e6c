"""Registration endpoints for choreographies, coaches, judges and support staff."""
