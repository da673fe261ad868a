"""Planning exports and form validation helpers."""
