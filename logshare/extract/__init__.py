"""
Extract Layer - Log Share API I/O

This layer talks to the Log Share API.
- No imports from the load layer
- Pure URL construction (query)
- Streaming GET requests and status classification (logshare_api)
- JSON Lines framing with bounded memory (stream)
- Fan-out to the caller's sinks (fanout)
- Zone name lookup (zones)
- Never parses individual log records
"""
