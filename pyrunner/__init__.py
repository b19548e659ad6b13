# -----------------------------------------------------------------------------
# PYTHON RUNNER
# -----------------------------------------------------------------------------
# Fetches an arbitrary Python project, installs it and starts it as a service.
# -----------------------------------------------------------------------------

__version__ = "1.0.0"
