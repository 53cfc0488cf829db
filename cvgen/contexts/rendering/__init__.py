"""
Rendering Context

Responsibilities:
- Allocates, stages and removes per-job workspaces
- Invokes the external document compiler
- Verifies and atomically publishes compiled documents

Owns: Workspaces, compiler invocation, output naming
Never: Decides which assets a job needs
"""
