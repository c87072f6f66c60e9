"""Core of the telemetry client: configuration, records, protocols, delivery engine."""
