"""Services: caching, fetch orchestration, remote clients and alerts."""
