"""
Generation Context

Responsibilities:
- Drives jobs through the state machine (resolve, stage, compile, finalize, clean up)
- One-shot generation and watch mode with a configurable failure policy
- Records job state changes in the event log

Owns: Job lifecycle, watch sessions
Never: Knows about CLI or HTTP surfaces

The orchestrator lives in cvgen.contexts.generation.pipeline.
"""
