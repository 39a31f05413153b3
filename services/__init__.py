"""Runtime services shared by the HTTP layer."""
