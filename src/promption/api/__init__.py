"""HTTP API: health probes and versioned module routers."""
