"""Input node - emulates a telemetry-producing field device over UDP."""

__version__ = "0.1.0"
