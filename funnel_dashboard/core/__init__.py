"""Cross-cutting helpers: logging and telemetry."""
