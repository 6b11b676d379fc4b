"""toolcheck core — the verification pipeline components.

Leaf-first: transport, digest, manifest_loader, java_toolchain, templates,
materializer, command_runner, launcher, build_driver, state_machine,
orchestrator.
"""
