"""User-facing front-ends for Pipesmith."""
