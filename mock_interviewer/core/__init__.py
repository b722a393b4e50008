"""Core call handling: the call lifecycle state machine and transcript accumulation."""
