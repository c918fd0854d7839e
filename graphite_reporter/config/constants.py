"""
Reporter defaults and environment variable names.

See graphite_reporter/config/models.py for how these are applied.
"""

# Plaintext protocol port of Carbon
DEFAULT_GRAPHITE_PORT = 2003

DEFAULT_FLUSH_INTERVAL_SECONDS = 60.0

# Bound on both connect and write so a stalled backend cannot block the loop
DEFAULT_TIMEOUT_SECONDS = 5.0

DEFAULT_PERCENTILES = (0.5, 0.75, 0.95, 0.99, 0.999)

# Environment variables read by ReporterConfig.from_env()
ADDRESS_ENV_VAR = "GRAPHITE_ADDRESS"
PREFIX_ENV_VAR = "GRAPHITE_PREFIX"
FLUSH_INTERVAL_ENV_VAR = "GRAPHITE_FLUSH_INTERVAL"
DURATION_UNIT_ENV_VAR = "GRAPHITE_DURATION_UNIT"
PERCENTILES_ENV_VAR = "GRAPHITE_PERCENTILES"
TIMEOUT_ENV_VAR = "GRAPHITE_TIMEOUT"

# Example .env file
ENV_FILE_EXAMPLE = """
GRAPHITE_ADDRESS=carbon.internal:2003
GRAPHITE_PREFIX=myapp.web01
GRAPHITE_FLUSH_INTERVAL=10
GRAPHITE_DURATION_UNIT=ms
GRAPHITE_PERCENTILES=0.5,0.75,0.99,0.999
GRAPHITE_TIMEOUT=5
"""
