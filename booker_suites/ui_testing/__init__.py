"""Browser automation of the Restful Booker web UI."""
