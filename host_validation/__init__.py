"""Host validation harness: concurrent checks against live machine state."""
