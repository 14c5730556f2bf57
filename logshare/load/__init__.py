"""
Load Layer - Log Destinations

This layer opens the concrete sinks logs are streamed into.
- No imports from the extract layer
- Local files
- Google Cloud Storage objects
"""
