"""Authentication: token issuing, verification and country scoping."""
