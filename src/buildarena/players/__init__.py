"""Player records, economy and lazy creation."""
