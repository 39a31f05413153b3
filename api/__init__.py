"""HTTP routes and schemas for the candidate interview API."""
